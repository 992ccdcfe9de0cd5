"""Actionable error catalog for dfbuildpack."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "php_not_found": {
        "what": "PHP not found.",
        "next": "Make sure the PHP buildpack runs before this buildpack.",
    },
    "git_not_found": {
        "what": "git not found.",
        "next": "Use a stack image that ships git, or add a buildpack that installs it.",
    },
    "clone_failed": {
        "what": "Could not clone {repository}: {reason}",
        "next": "Check the repository URL and branch, and that the build has network access.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
