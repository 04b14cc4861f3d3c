STATE_DIR_NAME = ".todo_board"
CONFIG_FILE = "config.yaml"
STORE_FILENAME = "todos.json"
LOCK_SUFFIX = ".lock"
STORAGE_KEY = "todos"
STORE_VERSION = 1
WINDOWS_LOCK_BYTES = 4096

DEFAULT_SORT = "dueDate"
DEFAULT_STATUS_FILTER = "all"
DEFAULT_LOG_LEVEL = "INFO"
