"""Extract user-facing test steps from a case block."""

import re

from suite_doctor.models.feature_models import StepAction, TestStep

_STR = r"""(?P<q{n}>['"`])(?P<{name}>.*?)(?P=q{n})"""

GOTO_PATTERN = re.compile(r"\.goto\(\s*" + _STR.format(n=1, name="url"))
CLICK_PATTERN = re.compile(r"\.click\(\s*" + _STR.format(n=1, name="selector"))
FILL_PATTERN = re.compile(
    r"\.fill\(\s*" + _STR.format(n=1, name="selector") + r"\s*,\s*(?P<value>[^)]*)\)"
)
FILL_VALUE_PATTERN = re.compile(r"\.fill\(\s*(?P<value>[^),]*)\)")
UPLOAD_PATTERN = re.compile(r"\.setInputFiles\(\s*" + _STR.format(n=1, name="selector"))
WAIT_SELECTOR_PATTERN = re.compile(r"\.waitForSelector\(\s*" + _STR.format(n=1, name="selector"))
WAIT_TIMEOUT_PATTERN = re.compile(r"\.waitForTimeout\(\s*(?P<ms>[^)]+)\)")
LOCATOR_PATTERN = re.compile(
    r"\.(?:locator|getByTestId|getByRole|getByText|getByLabel|getByPlaceholder)\(\s*"
    + _STR.format(n=1, name="target")
)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"`":
        return value[1:-1]
    return value


def _locator_target(line: str) -> str | None:
    match = LOCATOR_PATTERN.search(line)
    return match.group("target") if match else None


def _step_for_line(line: str, line_no: int) -> TestStep | None:
    if match := GOTO_PATTERN.search(line):
        return TestStep(action=StepAction.NAVIGATE, target=match.group("url"), line=line_no)

    if ".click(" in line:
        match = CLICK_PATTERN.search(line)
        target = match.group("selector") if match else _locator_target(line)
        return TestStep(action=StepAction.CLICK, target=target, line=line_no)

    if ".fill(" in line:
        if match := FILL_PATTERN.search(line):
            return TestStep(
                action=StepAction.FILL,
                target=match.group("selector"),
                data=_unquote(match.group("value")),
                line=line_no,
            )
        if match := FILL_VALUE_PATTERN.search(line):
            return TestStep(
                action=StepAction.FILL,
                target=_locator_target(line),
                data=_unquote(match.group("value")),
                line=line_no,
            )
        return None

    if ".setInputFiles(" in line:
        match = UPLOAD_PATTERN.search(line)
        target = match.group("selector") if match else _locator_target(line)
        return TestStep(action=StepAction.UPLOAD, target=target, line=line_no)

    if match := WAIT_SELECTOR_PATTERN.search(line):
        return TestStep(
            action=StepAction.WAIT_FOR_SELECTOR,
            target=match.group("selector"),
            line=line_no,
        )

    if match := WAIT_TIMEOUT_PATTERN.search(line):
        return TestStep(
            action=StepAction.WAIT_FOR_TIMEOUT,
            data=match.group("ms").strip(),
            line=line_no,
        )

    return None


def extract_steps(block_content: str) -> list[TestStep]:
    """Return the recognised steps of a block in source order.

    Lines without a recognised call produce no step.
    """
    steps = []
    for line_no, line in enumerate(block_content.split("\n"), start=1):
        step = _step_for_line(line, line_no)
        if step is not None:
            steps.append(step)
    return steps
