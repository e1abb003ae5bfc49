"""External interpreter backends (bash, node, ruby, ...).

Each run writes the script to a temp file and starts a fresh process,
so these backends keep no state: an instance tag is accepted and
ignored. Lines the script prints as ``VML> Command args`` are run
through the dispatcher after the process exits.
"""

import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from vml_designer.core import Settings, get_logger, safe_json_dumps
from .base import HostDispatch, ScriptArgs

logger = get_logger(__name__)

COMMAND_PREFIX = "VML> "

# tag -> (argv prefix, script suffix)
PROCESS_BACKENDS: dict[str, tuple[tuple[str, ...], str]] = {
    "bash": (("bash",), ".sh"),
    "sh": (("sh",), ".sh"),
    "python3": (("python3",), ".py"),
    "node": (("node",), ".js"),
    "ruby": (("ruby",), ".rb"),
    "perl": (("perl",), ".pl"),
    "powershell": (("pwsh", "-NoProfile", "-File"), ".ps1"),
    "pwsh": (("pwsh", "-NoProfile", "-File"), ".ps1"),
}


@dataclass(frozen=True)
class ProcessResult:
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


def script_environment(settings: Settings, setting: Callable[[str, str], str | None], args: ScriptArgs) -> dict[str, str]:
    """Environment passed to every external script."""
    env = dict(os.environ)
    env["VML_DB_PATH"] = settings.db_path
    env["VML_DIR"] = setting("vml_dir", "") or settings.vml_dir
    env["VML_APP_DIR"] = os.getcwd()
    env["VML_PARSER"] = setting("vml_parser", "builtin") or "builtin"
    env["VML_TEMP_DB"] = ""
    if isinstance(args, Mapping):
        for key, value in args.items():
            env[f"VML_{str(key).upper()}"] = str(value)
    elif args:
        for index, value in enumerate(args, start=1):
            env[f"VML_ARG{index}"] = str(value)
        env["VML_ARGC"] = str(len(args))
    if args:
        env["VML_ARGS_JSON"] = safe_json_dumps(dict(args) if isinstance(args, Mapping) else list(args))
    return env


class ProcessInterpreter:
    """One external interpreter; stateless by construction."""

    aliases: tuple[str, ...] = ()
    supports_sessions = False

    def __init__(
        self,
        name: str,
        settings: Settings,
        setting: Callable[[str, str], str | None],
        host: HostDispatch | None = None,
        timeout: float | None = None,
    ) -> None:
        if name not in PROCESS_BACKENDS:
            raise ValueError(f"Unknown process backend: {name}")
        self.name = name
        self.aliases = (name,)
        self.settings = settings
        self.setting = setting
        self.host = host
        self.timeout = timeout
        self.argv, self.suffix = PROCESS_BACKENDS[name]

    def run_stateless(self, source: str, args: ScriptArgs = None) -> ProcessResult:
        env = script_environment(self.settings, self.setting, args)
        handle, path = tempfile.mkstemp(suffix=self.suffix, prefix="vml_")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as script_file:
                script_file.write(source)
            positional = [] if isinstance(args, Mapping) or not args else [str(a) for a in args]
            try:
                completed = subprocess.run(
                    [*self.argv, path, *positional],
                    capture_output=True,
                    text=True,
                    env=env,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                logger.warning("script_timed_out", interpreter=self.name, timeout=self.timeout)
                return ProcessResult(_text(e.stdout), _text(e.stderr), -1, timed_out=True)
        finally:
            os.unlink(path)

        result = ProcessResult(completed.stdout, completed.stderr, completed.returncode)
        if result.stderr:
            logger.info("script_stderr", interpreter=self.name, stderr=result.stderr.rstrip())
        logger.debug("script_exited", interpreter=self.name, exit_code=result.exit_code)
        self._forward_commands(result.stdout)
        return result

    def run_in_session(self, instance: str, source: str, args: ScriptArgs = None) -> ProcessResult:
        logger.debug("instance_ignored", interpreter=self.name, instance=instance)
        return self.run_stateless(source, args)

    def _forward_commands(self, stdout: str) -> None:
        if self.host is None:
            return
        for line in stdout.splitlines():
            if not line.startswith(COMMAND_PREFIX):
                continue
            try:
                tokens = shlex.split(line[len(COMMAND_PREFIX):])
            except ValueError:
                logger.warning("bad_forwarded_command", interpreter=self.name, line=line)
                continue
            if tokens:
                self.host(tokens[0], tokens[1:])

    def session_count(self) -> int:
        return 0

    def close(self) -> None:
        pass


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value.decode("utf-8", "replace") if isinstance(value, bytes) else str(value)
