import io

from rich.console import Console

from dfbuildpack.services.output import BuildOutput


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


def _output(debug_enabled=False):
    stdout = io.StringIO()
    stderr = io.StringIO()
    output = BuildOutput(
        logger=DummyLogger(),
        console=Console(file=stdout, width=200),
        error_console=Console(file=stderr, width=200),
        debug_enabled=debug_enabled,
    )
    return output, stdout, stderr


def test_status_warning_and_error_prefixes():
    output, stdout, stderr = _output()

    output.status("Installing DreamFactory")
    output.warning("composer not found, skipping dependency installation")
    output.error("PHP not found.")

    assert stdout.getvalue().splitlines() == [
        "-----> Installing DreamFactory",
        "       Warning: composer not found, skipping dependency installation",
    ]
    assert stderr.getvalue() == " !     PHP not found.\n"


def test_debug_lines_only_when_enabled():
    quiet, quiet_stdout, _ = _output()
    quiet.debug("hidden")

    loud, loud_stdout, _ = _output(debug_enabled=True)
    loud.debug("shown [with brackets]")

    assert quiet_stdout.getvalue() == ""
    assert loud_stdout.getvalue() == "       [DEBUG] shown [with brackets]\n"
