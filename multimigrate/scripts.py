from pathlib import Path

from multimigrate.errors import ScriptLoadError


def read_migration_script(migration_dir: str | Path, script_name: str) -> str:
    script_path = Path(migration_dir) / script_name
    try:
        with script_path.open("r", encoding="utf-8") as infile:
            return infile.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ScriptLoadError(f"cannot read migration script {script_path}: {exc}") from exc
