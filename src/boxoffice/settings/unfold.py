"""Django Unfold admin configuration."""

from django.urls import reverse_lazy
from django.utils.translation import gettext_lazy as _

from .base import SITE_NAME, VERSION

UNFOLD = {
    "SITE_TITLE": f"{SITE_NAME} v{VERSION} Admin",
    "SITE_HEADER": f"{SITE_NAME} v{VERSION} Administration",
    "SITE_URL": "/",
    "SHOW_HISTORY": False,
    "SHOW_VIEW_ON_SITE": False,
    "SIDEBAR": {
        "show_search": True,
        "show_all_applications": False,
        "navigation": [
            {
                "title": _("Users & Accounts"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Users"),
                        "icon": "person",
                        "link": reverse_lazy("admin:accounts_boxofficeuser_changelist"),
                    },
                ],
            },
            {
                "title": _("Events"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Events"),
                        "icon": "event",
                        "link": reverse_lazy("admin:events_event_changelist"),
                    },
                    {
                        "title": _("Ticket Categories"),
                        "icon": "category",
                        "link": reverse_lazy("admin:events_ticketcategory_changelist"),
                    },
                ],
            },
            {
                "title": _("Ticketing"),
                "separator": True,
                "collapsible": True,
                "items": [
                    {
                        "title": _("Tickets"),
                        "icon": "confirmation_number",
                        "link": reverse_lazy("admin:events_ticket_changelist"),
                    },
                    {
                        "title": _("Sales"),
                        "icon": "payments",
                        "link": reverse_lazy("admin:events_sale_changelist"),
                    },
                    {
                        "title": _("Check-ins"),
                        "icon": "how_to_reg",
                        "link": reverse_lazy("admin:events_checkin_changelist"),
                    },
                    {
                        "title": _("Access Cards"),
                        "icon": "badge",
                        "link": reverse_lazy("admin:events_accesscard_changelist"),
                    },
                ],
            },
        ],
    },
}
