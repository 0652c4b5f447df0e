class MigrationError(RuntimeError):
    pass


class DirectoryFetchError(MigrationError):
    """The list of target databases could not be fetched. Fatal for the run."""


class ScriptLoadError(MigrationError):
    pass


class TargetConnectionError(MigrationError):
    pass


class ExecutionError(MigrationError):
    pass
