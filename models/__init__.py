# -------------------------
# Enums
# -------------------------
from .enums import (
    AccessLevel,
    FieldAccessLevel,
    ObjectType,
    Action,
    ButtonAction,
    SecurityLevel,
    BillingPeriod,
    SubscriptionStatus,
    PaymentMethod,
    PaymentStatus,
)

# -------------------------
# Profile Models
# -------------------------
from .profile import (
    ProfileBase,
    ProfileCreate,
    ProfileRead,
    ProfileUpdate,
    ObjectPermission,
    ObjectPermissionIn,
    FieldPermission,
    FieldPermissionIn,
)

# -------------------------
# Button Models
# -------------------------
from .button import (
    ButtonDefinition,
    ButtonPermission,
    ButtonPermissionIn,
)

# -------------------------
# Plan / Feature Models
# -------------------------
from .plan import (
    PlanRead,
    PlanUpdate,
    FeatureRead,
    FeatureCreate,
    PlanFeatureToggle,
    PlanFeatureEntry,
)

# -------------------------
# Subscription Models
# -------------------------
from .subscription import (
    SubscriptionRead,
    PaymentRequest,
    PaymentResult,
)
