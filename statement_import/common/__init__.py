# Shared models, logging and settings
