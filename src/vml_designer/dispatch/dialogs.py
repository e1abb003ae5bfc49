"""Dialog presentation seam."""

from typing import Protocol

from vml_designer.core import get_logger

logger = get_logger(__name__)


class DialogProvider(Protocol):
    """Presents modal dialogs; cancel yields an empty or falsy answer."""

    def open_file(self, title: str, file_filter: str = "") -> str: ...

    def save_file(self, title: str, default_name: str = "") -> str: ...

    def select_folder(self, title: str) -> str: ...

    def info(self, title: str, message: str) -> None: ...

    def error(self, title: str, message: str) -> None: ...

    def confirm(self, title: str, message: str) -> bool: ...

    def input(self, title: str, prompt: str, default: str = "") -> str: ...


class HeadlessDialogs:
    """No display: every dialog is logged and answered as cancelled."""

    def open_file(self, title: str, file_filter: str = "") -> str:
        logger.info("dialog_cancelled", kind="open_file", title=title)
        return ""

    def save_file(self, title: str, default_name: str = "") -> str:
        logger.info("dialog_cancelled", kind="save_file", title=title)
        return ""

    def select_folder(self, title: str) -> str:
        logger.info("dialog_cancelled", kind="select_folder", title=title)
        return ""

    def info(self, title: str, message: str) -> None:
        logger.info("dialog_info", title=title, message=message)

    def error(self, title: str, message: str) -> None:
        logger.error("dialog_error", title=title, message=message)

    def confirm(self, title: str, message: str) -> bool:
        logger.info("dialog_cancelled", kind="confirm", title=title)
        return False

    def input(self, title: str, prompt: str, default: str = "") -> str:
        logger.info("dialog_cancelled", kind="input", title=title)
        return ""
