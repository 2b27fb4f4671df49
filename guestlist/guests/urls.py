from guestlist.config.settings import settings

GUESTS_URL = f"{settings.api_prefix}/guests"
GUEST_URL = f"{GUESTS_URL}/{{guest_id}}"
GUEST_STATS_URL = f"{GUESTS_URL}/stats"
GUESTS_HISTORY_URL = f"{GUESTS_URL}/history"
GUEST_HISTORY_URL = f"{GUESTS_URL}/{{guest_id}}/history"
BULK_STATUS_URL = f"{GUESTS_URL}/bulk/status"
BULK_PASTOR_URL = f"{GUESTS_URL}/bulk/pastor"
BULK_DELETE_URL = f"{GUESTS_URL}/bulk/delete"
