from config.schema import SyncConfig


def default_sync_config() -> SyncConfig:
    """Built-in settings used when no config/sync_config.yaml exists."""
    return SyncConfig()


# ─── Endpoints (relative to the tenant root or the SCIM root) ─────────────────

TOKEN_ENDPOINT = "oauth2/token"
LIST_UNITS_ENDPOINT = "Training/Register/ListPage"
UNIT_DETAILS_ENDPOINT = "Training/Unit/GetTrainingUnitDetails"
TRAINEES_ENDPOINT = "Training/Trainee"
PROCESS_ENDPOINT = "Api/v1/Processes/{unique_id}"
EDIT_UNIT_ENDPOINT = "Training/Unit/EditTrainingUnit"
SAVE_SCHEDULE_ENDPOINT = "Training/Schedule/SaveSchedule"
SCIM_USER_ENDPOINT = "api/scim/users/{user_id}"
SCIM_USERS_ENDPOINT = "api/scim/users"

# Fixed filter parameters sent with every ListPage request
LIST_UNITS_FILTERS = {
    "SearchCriteria": "",
    "ListFilter": 0,
    "TrainingDue": 0,
    "StatusFilter": 0,
}


# ─── CSV schema ───────────────────────────────────────────────────────────────

MULTI_VALUE_SEPARATOR = ";"

COL_TITLE = "Title"
COL_DESCRIPTION = "Description"
COL_TYPE = "Type"
COL_ASSESSMENT = "Assessment Label"
COL_RENEW_CYCLE = "Renew Cycle"
COL_PROVIDER = "Provider"
COL_OWNER = "Owner Username"
COL_PROCESS_TITLES = "Linked Processes: Title"
COL_PROCESS_IDS = "Linked Processes: uniqueId"
COL_DOCUMENTS = "Linked Documents: Titles"
COL_TRAINEES = "Trainees: Usernames"

EXPORT_COLUMNS: list[str] = [
    COL_TITLE,
    COL_DESCRIPTION,
    COL_TYPE,
    COL_ASSESSMENT,
    COL_RENEW_CYCLE,
    COL_PROVIDER,
    COL_OWNER,
    COL_PROCESS_TITLES,
    COL_PROCESS_IDS,
    COL_DOCUMENTS,
    COL_TRAINEES,
]

# Import aborts before the first row if any of these is missing. A missing
# Owner Username column fails each row instead.
REQUIRED_IMPORT_COLUMNS: list[str] = [
    COL_TITLE,
    COL_DESCRIPTION,
    COL_TYPE,
    COL_ASSESSMENT,
    COL_RENEW_CYCLE,
    COL_PROVIDER,
    COL_PROCESS_IDS,
    COL_DOCUMENTS,
]

EXPORT_FILE_PATTERN = "TrainingUnits_Export_{stamp}.csv"
