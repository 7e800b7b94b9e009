# core/button_definitions.py

"""
Registry of UI buttons whose state follows object permissions.
Rows in the ``buttons`` table share these keys.
"""

from typing import Dict, List, Optional

from models.button import ButtonDefinition
from models.enums import ButtonAction


# Button action -> object permission flag
ACTION_PERMISSION_FIELD: Dict[ButtonAction, str] = {
    ButtonAction.create: "can_create",
    ButtonAction.read: "can_read",
    ButtonAction.view: "can_read",
    ButtonAction.update: "can_edit",
    ButtonAction.edit: "can_edit",
    ButtonAction.delete: "can_delete",
    ButtonAction.export: "can_read",
    ButtonAction.import_: "can_read",
    ButtonAction.print_: "can_read",
    ButtonAction.custom: "can_read",
}


def get_permission_field_for_action(action) -> str:
    """Unknown actions fall back to read."""
    try:
        return ACTION_PERMISSION_FIELD[ButtonAction(action)]
    except ValueError:
        return "can_read"


def _button(key, name, label, object_type, action, icon, variant="default", size="default"):
    return ButtonDefinition(
        key=key,
        name=name,
        label=label,
        object_type=object_type,
        action=action,
        icon=icon,
        variant=variant,
        size=size,
    )


BUTTON_DEFINITIONS: List[ButtonDefinition] = [
    # Property
    _button("property.create", "Créer un bien", "Créer un bien", "Property", "create", "Plus"),
    _button("property.edit", "Modifier un bien", "Modifier", "Property", "edit", "Edit", "outline", "sm"),
    _button("property.delete", "Supprimer un bien", "Supprimer", "Property", "delete", "Trash2", "destructive", "sm"),
    _button("property.view", "Voir un bien", "Voir", "Property", "view", "Eye", "ghost", "sm"),

    # Tenant
    _button("tenant.create", "Créer un locataire", "Créer un locataire", "Tenant", "create", "UserPlus"),
    _button("tenant.edit", "Modifier un locataire", "Modifier", "Tenant", "edit", "Edit", "outline", "sm"),
    _button("tenant.delete", "Supprimer un locataire", "Supprimer", "Tenant", "delete", "Trash2", "destructive", "sm"),

    # Lease
    _button("lease.create", "Créer un bail", "Créer un bail", "Lease", "create", "FileText"),
    _button("lease.edit", "Modifier un bail", "Modifier", "Lease", "edit", "Edit", "outline", "sm"),
    _button("lease.delete", "Supprimer un bail", "Supprimer", "Lease", "delete", "Trash2", "destructive", "sm"),

    # Payment
    _button("payment.create", "Enregistrer un paiement", "Enregistrer un paiement", "Payment", "create", "CreditCard"),
    _button("payment.edit", "Modifier un paiement", "Modifier", "Payment", "edit", "Edit", "outline", "sm"),
    _button("payment.delete", "Supprimer un paiement", "Supprimer", "Payment", "delete", "Trash2", "destructive", "sm"),
    _button("payment.export", "Exporter les paiements", "Exporter", "Payment", "export", "Download", "outline", "sm"),

    # Journal entries
    _button("journal.create", "Créer une écriture", "Nouvelle Écriture", "JournalEntry", "create", "Plus"),
    _button("journal.edit", "Modifier une écriture", "Modifier", "JournalEntry", "edit", "Edit", "outline", "sm"),
    _button("journal.delete", "Supprimer une écriture", "Supprimer", "JournalEntry", "delete", "Trash2", "destructive", "sm"),
    _button("journal.validate", "Valider une écriture", "Valider", "JournalEntry", "custom", "CheckCircle", "default", "sm"),

    # Task
    _button("task.create", "Créer une tâche", "Créer une tâche", "Task", "create", "Plus"),
    _button("task.edit", "Modifier une tâche", "Modifier", "Task", "edit", "Edit", "outline", "sm"),
    _button("task.delete", "Supprimer une tâche", "Supprimer", "Task", "delete", "Trash2", "destructive", "sm"),

    # User
    _button("user.create", "Inviter un utilisateur", "Inviter utilisateur", "User", "create", "UserPlus"),
    _button("user.edit", "Modifier un utilisateur", "Modifier", "User", "edit", "Edit", "outline", "sm"),
    _button("user.delete", "Supprimer un utilisateur", "Supprimer", "User", "delete", "Trash2", "destructive", "sm"),
]

_BY_KEY = {b.key: b for b in BUTTON_DEFINITIONS}


def get_button_definition(key: str) -> Optional[ButtonDefinition]:
    return _BY_KEY.get(key)


def get_buttons_for_object_type(object_type: str) -> List[ButtonDefinition]:
    return [b for b in BUTTON_DEFINITIONS if b.object_type == object_type]
