class EnvNotFoundError(Exception):
    """Raised when a required environment variable is not found."""

    def __init__(self, env_var_name: str):
        super().__init__(f"Environment variable '{env_var_name}' not found.")


class MissingDBNameError(Exception):
    """Raised when an operation needs a database name and none is configured."""

    def __init__(self):
        super().__init__("Database name is not set in the connection configuration.")


class SessionNotSetError(Exception):
    """Raised when the database session is not set."""

    def __init__(self):
        super().__init__("Database session is not set.")


class EmptyNameError(ValueError):
    """Raised when a line or station is given a blank name."""

    def __init__(self, entity_name: str):
        super().__init__(f"{entity_name} name must not be empty.")


class InvalidLineStationError(ValueError):
    """Raised when a station link has an inconsistent predecessor and distance."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid line station: {reason}.")


class DataIntegrityError(Exception):
    """Raised when a write violates a database integrity constraint."""

    def __init__(self, message: str = "Database integrity constraint violated."):
        super().__init__(message)


class DuplicateNameError(DataIntegrityError):
    """Raised when a line or station name is already taken."""

    def __init__(self, entity_name: str, name: str | None):
        self.entity_name = entity_name
        self.name = name
        super().__init__(f"{entity_name} named '{name}' already exists.")


class EntityInUseError(DataIntegrityError):
    """Raised when deleting a row that other rows still reference."""

    def __init__(self, entity_name: str, name: str | None):
        self.entity_name = entity_name
        self.name = name
        super().__init__(f"{entity_name} '{name}' is still referenced and cannot be deleted.")
