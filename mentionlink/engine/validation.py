"""Settings validation against the current vault."""

from loguru import logger

from .config import LinkingSettings
from .notifications import Notifier
from .vault import Vault


def validate_settings(settings: LinkingSettings, vault: Vault, notifier: Notifier) -> LinkingSettings:
    """
    Check configured paths against the vault.

    Every missing folder or template is reported and reset to an empty value
    in the returned snapshot; nothing here is fatal.
    """
    updates = {}

    rules = list(settings.scope_rules)
    changed_rules = False
    for index, rule in enumerate(rules):
        if rule.is_inert:
            continue
        if not vault.exists(rule.folder):
            notifier.notify(
                f"Unable to find folder at path: {rule.folder}. "
                "Please add it if you want to limit links to this folder."
            )
            rules[index] = rule.model_copy(update={"folder": ""})
            changed_rules = True
    if changed_rules:
        updates["scope_rules"] = rules

    if settings.show_add_new_note and settings.add_new_note_template_file:
        template_path = f"{settings.add_new_note_template_file}.{settings.default_extension}"
        if not vault.exists(template_path):
            notifier.notify(f"Unable to find template file at path: {template_path}")
            updates["add_new_note_template_file"] = ""

    if settings.show_add_new_note and settings.add_new_note_directory:
        if not vault.exists(settings.add_new_note_directory):
            notifier.notify(
                f"Unable to find folder for new notes at path: {settings.add_new_note_directory}. "
                "Please add it if you want to create new notes in this folder."
            )
            updates["add_new_note_directory"] = ""

    if not updates:
        return settings

    logger.info(f"Reset invalid settings: {', '.join(updates)}")
    return settings.model_copy(update=updates)
