"""Tests for the per-block feature extractors."""
import pytest

from samples import LOGIN_SPEC, LONG_WAIT_LINE, LONG_WAIT_SPEC
from suite_doctor.extractors import literals
from suite_doctor.extractors.assertions import extract_assertions, parse_assertion
from suite_doctor.extractors.blocks import extract_cases
from suite_doctor.extractors.comments import find_uncommented_lines, has_nearby_comment
from suite_doctor.extractors.complexity import score_complexity
from suite_doctor.extractors.duplicates import count_duplicated_lines, find_duplicate_lines
from suite_doctor.extractors.steps import extract_steps
from suite_doctor.extractors.tags import infer_features, infer_tags
from suite_doctor.models import ComplexityBreakdown, ComplexityLevel, StepAction, feature_models


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

class TestExtractSteps:
    """Tests for extract_steps()."""

    def test_login_case_steps(self):
        case = extract_cases(LOGIN_SPEC)[0]
        steps = extract_steps(case.content)

        assert [step.action for step in steps] == [StepAction.FILL, StepAction.CLICK]
        assert steps[0].target == "#email"
        assert steps[0].data == "user@example.com"
        assert steps[0].line == 2
        assert steps[1].target == "#submit"
        assert steps[1].line == 3

    def test_navigation_upload_and_waits(self):
        content = (
            "await page.goto('/upload');\n"
            "await page.setInputFiles('input[type=file]', 'pet.png');\n"
            "await page.waitForSelector('.preview');\n"
            "await page.waitForTimeout(2000);\n"
            "console.log('done');"
        )
        steps = extract_steps(content)

        assert [step.action for step in steps] == [
            StepAction.NAVIGATE,
            StepAction.UPLOAD,
            StepAction.WAIT_FOR_SELECTOR,
            StepAction.WAIT_FOR_TIMEOUT,
        ]
        assert steps[0].target == "/upload"
        assert steps[1].target == "input[type=file]"
        assert steps[2].target == ".preview"
        assert steps[3].data == "2000"
        assert [step.line for step in steps] == [1, 2, 3, 4]

    def test_locator_chains(self):
        steps = extract_steps(
            "await page.getByTestId('save-button').click();\n"
            "await page.locator('#name').fill('Rex');"
        )
        assert steps[0].action == StepAction.CLICK
        assert steps[0].target == "save-button"
        assert steps[1].action == StepAction.FILL
        assert steps[1].target == "#name"
        assert steps[1].data == "Rex"

    def test_unrecognised_lines_yield_nothing(self):
        assert extract_steps("const total = items.length;\nconsole.log(total);") == []

    def test_step_descriptions(self):
        step = feature_models.TestStep
        assert step(action=StepAction.FILL, target="#email", data="x").description == (
            "Fill in #email with 'x'"
        )
        assert step(action=StepAction.WAIT_FOR_TIMEOUT, data="2000").description == "Wait 2000ms"
        assert step(action=StepAction.NAVIGATE, target="/").description == "Navigate to /"


# ---------------------------------------------------------------------------
# Assertions
# ---------------------------------------------------------------------------

class TestAssertions:
    """Tests for parse_assertion() and extract_assertions()."""

    def test_known_matcher_becomes_sentence(self):
        assertion = parse_assertion("    expect(title).toBe('Home');")
        assert assertion.text == "title should equal 'Home'"
        assert assertion.matcher == "toBe"
        assert assertion.expected == "'Home'"
        assert assertion.is_recognized

    def test_matcher_without_argument(self):
        assertion = parse_assertion("expect(banner).toBeVisible();")
        assert assertion.text == "banner should be visible"
        assert assertion.expected is None

    def test_unknown_matcher_kept_verbatim(self):
        assertion = parse_assertion("  expect(count).toBeGreaterThan(2);")
        assert assertion.text == "expect(count).toBeGreaterThan(2);"
        assert not assertion.is_recognized

    def test_locator_target_becomes_sentence(self):
        assertion = parse_assertion("    await expect(page.locator('#x')).toBeVisible();")
        assert assertion.text == "page.locator('#x') should be visible"
        assert assertion.target == "page.locator('#x')"

    def test_nested_call_in_expected_value(self):
        assertion = parse_assertion("expect(page.getByTestId('rows')).toHaveCount(getCount('a'));")
        assert assertion.text == "page.getByTestId('rows') should have getCount('a') matching elements"

    def test_unparseable_expect_falls_back_to_line(self):
        assertion = parse_assertion("    await expect(wrap(page.locator('#x'))).toBeVisible();")
        assert assertion.text == "expect(wrap(page.locator('#x'))).toBeVisible();"
        assert assertion.matcher is None

    def test_line_without_expect(self):
        assert parse_assertion("await page.click('#go');") is None

    def test_extract_in_order(self):
        content = "expect(a).toBe(1);\nawait page.click('#x');\nexpect(list).toContain('b');"
        texts = [assertion.text for assertion in extract_assertions(content)]
        assert texts == ["a should equal 1", "list should contain 'b'"]


# ---------------------------------------------------------------------------
# Complexity
# ---------------------------------------------------------------------------

class TestComplexity:
    """Tests for score_complexity()."""

    def test_empty_content(self):
        breakdown = score_complexity("")
        assert breakdown.score == 0.0
        assert breakdown.level == ComplexityLevel.LOW

    def test_breakdown_counts(self):
        content = (
            "test('x', async () => {\n"
            "  if (a) {\n"
            "    for (const b of c) {\n"
            "      await d();\n"
            "    }\n"
            "  } else {\n"
            "    await e();\n"
            "  }\n"
            "});"
        )
        breakdown = score_complexity(content)
        assert breakdown.max_nesting == 3
        assert breakdown.conditional_count == 2
        assert breakdown.loop_count == 1
        assert breakdown.async_op_count == 2
        assert breakdown.score == pytest.approx(8.6)
        assert breakdown.level == ComplexityLevel.HIGH

    def test_score_is_clipped(self):
        breakdown = score_complexity("{{{{{{\nif (a) if (b)\n}}}}}}")
        assert breakdown.max_nesting == 6
        assert breakdown.score == 10.0

    def test_keywords_are_word_bounded(self):
        breakdown = score_complexity("const elsewhere = notify(x); const casework = 1;")
        assert breakdown.conditional_count == 0

    @pytest.mark.parametrize(
        "score, level",
        [(0, ComplexityLevel.LOW), (3, ComplexityLevel.LOW), (3.1, ComplexityLevel.MEDIUM),
         (7, ComplexityLevel.MEDIUM), (7.5, ComplexityLevel.HIGH)],
    )
    def test_level_thresholds(self, score, level):
        assert ComplexityBreakdown(score=score).level == level


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class TestTags:
    """Tests for infer_tags() and infer_features()."""

    def test_domain_then_complexity_then_type(self):
        tags = infer_tags("shows error on login", "", ComplexityBreakdown(score=5))
        assert tags == ["authentication", "complexity-medium", "error-handling"]

    def test_multiple_domains_keep_table_order(self):
        tags = infer_tags(
            "uploads a pet photo",
            "await page.setInputFiles('#photo', 'rex.png');",
            ComplexityBreakdown(score=1),
        )
        assert tags == ["pet-management", "file-upload", "complexity-low"]

    def test_features_are_case_insensitive_and_multilingual(self):
        assert infer_features("LOGIN flow") == ["authentication"]
        assert infer_features("登录页面") == ["authentication"]
        assert infer_features("nothing relevant") == []


# ---------------------------------------------------------------------------
# Duplicates
# ---------------------------------------------------------------------------

class TestDuplicates:
    """Tests for duplicate-line detection."""

    CONTENT = "\n".join([
        "await page.click('#submit-button');",
        "short();",
        "await page.click('#submit-button');",
        "short();",
        "  await page.click('#submit-button');",
        "// a repeated comment line here",
        "// a repeated comment line here",
    ])

    def test_finds_repeated_long_lines(self):
        duplicates = find_duplicate_lines(self.CONTENT)
        assert len(duplicates) == 1
        assert duplicates[0].text == "await page.click('#submit-button');"
        assert duplicates[0].line_numbers == [1, 3, 5]
        assert duplicates[0].occurrences == 3

    def test_min_occurrences(self):
        assert find_duplicate_lines(self.CONTENT, min_occurrences=4) == []

    def test_count(self):
        assert count_duplicated_lines(self.CONTENT) == 1

    def test_length_must_exceed_minimum(self):
        exactly = "x" * 20
        longer = "y" * 21
        content = "\n".join([exactly, exactly, longer, longer])
        assert [d.text for d in find_duplicate_lines(content)] == [longer]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

class TestComments:
    """Tests for needs-explanation detection."""

    def test_uncommented_long_wait(self):
        findings = find_uncommented_lines(LONG_WAIT_SPEC)
        assert len(findings) == 1
        assert findings[0].line == LONG_WAIT_LINE
        assert findings[0].kind == "long-wait"
        assert findings[0].text == "await page.waitForTimeout(5000);"

    def test_comment_within_window_suppresses_finding(self):
        lines = LONG_WAIT_SPEC.split("\n")
        lines.insert(LONG_WAIT_LINE - 2, "    // the backend needs time to settle")
        assert find_uncommented_lines("\n".join(lines)) == []

    def test_short_wait_not_flagged(self):
        assert find_uncommented_lines("await page.waitForTimeout(500);") == []

    def test_window_excludes_the_line_itself(self):
        lines = ["// c", "x", "y", "z"]
        assert has_nearby_comment(lines, 2)
        assert not has_nearby_comment(lines, 3)

    def test_trailing_comment_counts(self):
        line = "    await page.waitForTimeout(5000); // chart animation takes 5s"
        assert has_nearby_comment([line], 0)
        assert find_uncommented_lines(LONG_WAIT_SPEC.replace(
            "await page.waitForTimeout(5000);",
            "await page.waitForTimeout(5000); // chart animation takes 5s",
        )) == []

    def test_url_is_not_a_trailing_comment(self):
        line = "await page.evaluate(() => fetch('https://example.com/api'));"
        assert not has_nearby_comment([line], 0)
        assert find_uncommented_lines(line)[0].kind == "page-evaluate"


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

class TestLiterals:
    """Tests for the timeout and test-data literal helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("user@example.com", True),
            ("testing-admin-user", True),
            ("my-secret-password", True),
            ("#login-button-primary", False),
            ("[data-testid=submit]", False),
            ("Hello wonderful world", False),
        ],
    )
    def test_looks_like_test_data(self, value, expected):
        assert literals.looks_like_test_data(value) is expected

    def test_timeout_names(self):
        assert literals.timeout_constant_name(5000) == "LONG_TIMEOUT"
        assert literals.timeout_constant_name(1500) == "TIMEOUT_1500MS"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("owner@example.com", "TEST_EMAIL"),
            ("my-secret-password", "TEST_PASSWORD"),
            ("admin-user", "TEST_USERNAME"),
            ("pet-buddy-name", "TEST_PET_NAME"),
            ("testing-data", "TEST_DATA_CONSTANT"),
        ],
    )
    def test_data_names(self, value, expected):
        assert literals.test_data_constant_name(value) == expected
