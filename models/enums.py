from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# OBJECT ACCESS LEVEL
# -----------------------------------------------------
class AccessLevel(BaseStrEnum):
    """Summary of an object permission, ordered least to most permissive."""

    none = "None"
    read = "Read"
    read_write = "ReadWrite"
    all = "All"


# -----------------------------------------------------
# FIELD ACCESS LEVEL
# -----------------------------------------------------
class FieldAccessLevel(BaseStrEnum):
    """Field permissions have no create/delete, so no "All" level."""

    none = "None"
    read = "Read"
    read_write = "ReadWrite"


# -----------------------------------------------------
# OBJECT TYPE
# -----------------------------------------------------
class ObjectType(BaseStrEnum):
    """Business objects a profile can be granted access to."""

    property = "Property"
    unit = "Unit"
    tenant = "Tenant"
    lease = "Lease"
    payment = "Payment"
    task = "Task"
    message = "Message"
    journal_entry = "JournalEntry"
    user = "User"
    organization = "Organization"
    profile = "Profile"
    report = "Report"
    activity = "Activity"


# -----------------------------------------------------
# PERMISSION ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    """Action checked against an object permission."""

    create = "create"
    read = "read"
    edit = "edit"
    delete = "delete"
    view_all = "viewAll"


# -----------------------------------------------------
# BUTTON ACTION
# -----------------------------------------------------
class ButtonAction(BaseStrEnum):
    """UI action a button triggers; mapped onto an object permission flag."""

    create = "create"
    read = "read"
    update = "update"
    edit = "edit"
    delete = "delete"
    view = "view"
    export = "export"
    import_ = "import"
    print_ = "print"
    custom = "custom"


# -----------------------------------------------------
# SECURITY LEVEL
# -----------------------------------------------------
class SecurityLevel(BaseStrEnum):
    """Layer of the security check that denied a request."""

    plan = "plan"
    profile = "profile"
    object = "object"
    field = "field"


# -----------------------------------------------------
# PLAN PRICE TYPE
# -----------------------------------------------------
class PriceType(BaseStrEnum):
    fixed = "fixed"
    custom = "custom"


# -----------------------------------------------------
# BILLING PERIOD
# -----------------------------------------------------
class BillingPeriod(BaseStrEnum):
    monthly = "monthly"
    yearly = "yearly"


# -----------------------------------------------------
# SUBSCRIPTION STATUS
# -----------------------------------------------------
class SubscriptionStatus(BaseStrEnum):
    """Organization subscription state."""

    active = "active"
    canceled = "canceled"
    past_due = "past_due"
    trialing = "trialing"
    expired = "expired"


# -----------------------------------------------------
# PAYMENT METHOD
# -----------------------------------------------------
class PaymentMethod(BaseStrEnum):
    stripe = "stripe"
    paypal = "paypal"
    wave = "wave"
    orange_money = "orange_money"


# -----------------------------------------------------
# PAYMENT STATUS
# -----------------------------------------------------
class PaymentStatus(BaseStrEnum):
    """Lifecycle of a subscription_payments row."""

    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"
    disputed = "disputed"
