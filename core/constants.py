"""
Constants for the assistant configuration store.
"""

# ----- Application identity -----

APP_NAME = "Assistant Desk"
APP_AUTHOR = "AssistantDesk"
CONFIG_FILE_NAME = "config.json"
LOG_FILE_NAME = "assistant_desk.log"


# ----- Environment variables -----

ENV_CONFIG_DIR = "ASSISTANT_DESK_CONFIG_DIR"
ENV_OPENAI_API_KEY = "OPENAI_API_KEY"
ENV_LOG_FILE_LEVEL = "ASSISTANT_DESK_LOG_FILE_LEVEL"
ENV_LOG_CONSOLE_LEVEL = "ASSISTANT_DESK_LOG_CONSOLE_LEVEL"
ENV_LOG_CONFIG_LEVEL = "ASSISTANT_DESK_LOG_CONFIG_LEVEL"
ENV_LOG_DIR = "ASSISTANT_DESK_LOG_DIR"


# ----- Preferences -----

DEFAULT_LANGUAGE = "python"
DEFAULT_OPACITY = 1.0
MIN_OPACITY = 0.1
MAX_OPACITY = 1.0


# ----- Events -----

CONFIG_UPDATED_EVENT = "config-updated"
