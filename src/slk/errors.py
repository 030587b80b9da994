from __future__ import annotations


class SlackAuthError(RuntimeError):
    pass


class WorkspaceNotFound(SlackAuthError):
    def __init__(self, checked: list[str]) -> None:
        self.checked = checked
        lines = "\n".join(f"  {p}" for p in checked)
        super().__init__(
            f"Could not find Slack data directory.\nChecked:\n{lines}\nIs Slack installed?"
        )


class SecretNotFound(SlackAuthError):
    pass


class CookieNotFound(SlackAuthError):
    pass


class UnsupportedCookieFormat(SlackAuthError):
    pass


class CookieDecryptFailed(SlackAuthError):
    pass


class NoTokenFound(SlackAuthError):
    pass


class ValidationTimeout(SlackAuthError):
    pass
