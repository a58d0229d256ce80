from techelons.services.event_service import (
    get_fest_info, get_event, list_events,
    replace_fest_data, set_event_status, load_fest_document,
)
from techelons.services.registration_service import (
    SubmissionState, SubmissionOutcome,
    find_registration, get_registration_details,
    check_event_open, check_team_size, check_internal_duplicates,
    check_members_already_registered, submit_registration,
    list_registrations, delete_registration, flush_registrations,
)
from techelons.services.workshop_service import (
    WorkshopOutcome, register_for_workshop,
    list_workshop_registrations, flush_workshop_registrations,
)
from techelons.services.notification_service import (
    notify_registration_confirmed, notify_workshop_registration,
    render_registration_email, render_workshop_email,
)
from techelons.services.mailer import MailDeliveryError, SmtpMailer
from techelons.services.token_service import encode_registration_token, decode_registration_token
from techelons.services.content_cache import ContentCache, content_cache
from techelons.services.content_service import (
    get_site_content, replace_site_content, edit_site_content, get_workshop_config,
    replace_in_list, remove_from_list, set_in, apply_edit,
)

__all__ = [
    # events
    "get_fest_info", "get_event", "list_events",
    "replace_fest_data", "set_event_status", "load_fest_document",
    # registration workflow
    "SubmissionState", "SubmissionOutcome",
    "find_registration", "get_registration_details",
    "check_event_open", "check_team_size", "check_internal_duplicates",
    "check_members_already_registered", "submit_registration",
    "list_registrations", "delete_registration", "flush_registrations",
    # workshop
    "WorkshopOutcome", "register_for_workshop",
    "list_workshop_registrations", "flush_workshop_registrations",
    # notifications
    "notify_registration_confirmed", "notify_workshop_registration",
    "render_registration_email", "render_workshop_email",
    "MailDeliveryError", "SmtpMailer",
    # token
    "encode_registration_token", "decode_registration_token",
    # content
    "ContentCache", "content_cache",
    "get_site_content", "replace_site_content", "edit_site_content", "get_workshop_config",
    "replace_in_list", "remove_from_list", "set_in", "apply_edit",
]
