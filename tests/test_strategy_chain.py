"""
Tests for strategy chaining, adaptive selection and apply_patch_to_content.
"""

import pytest

from patchpilot.utils.diff_utils import (
    ApplyState,
    ChainedPatchStrategy,
    MalformedPatchError,
    OptimizedChainedStrategy,
    PatchStrategyFactory,
    apply_patch_to_content,
    use_optimized_strategies,
)
from patchpilot.utils.diff_utils.application import GreedyStrategy, StrictStrategy
from patchpilot.utils.diff_utils.parsing import Hunk, HunkLine, LineType, ParsedPatch, parse_patch

FUNCTION = "def f():\n    a = 1\n    b = 2\n    return a + b\n"
FUNCTION_PATCHED = "def f():\n    a = 1\n    b = 3\n    return a + b\n"
STALE_CONTEXT_DIFF = "--- a/f.txt\n+++ b/f.txt\n@@ -1,4 +1,4 @@\n a\n ghost\n-b\n+B\n c\n"

CHANGED_LINES = (2, 40, 80, 120, 160, 199)


@pytest.fixture
def large_file():
    return "".join(f"line {i}\n" for i in range(1, 201))


@pytest.fixture
def large_file_patched(large_file):
    lines = large_file.splitlines()
    for number in CHANGED_LINES:
        lines[number - 1] = lines[number - 1].upper()
    return "\n".join(lines) + "\n"


@pytest.fixture
def large_patch(large_file, large_file_patched, diff_maker):
    patch = parse_patch(diff_maker(large_file, large_file_patched, "big.txt"))[0]
    assert len(patch.hunks) == len(CHANGED_LINES)
    return patch


def with_stale_first_hunk(patch):
    """Insert a context line that exists nowhere into the first hunk."""
    patch = patch.clone()
    first = patch.hunks[0]
    first.lines.insert(1, HunkLine(LineType.CONTEXT, "ghost"))
    first.old_lines += 1
    first.new_lines += 1
    return patch


def test_default_strategy_order():
    chain = PatchStrategyFactory.create_default_strategy(2)

    assert chain.name == "chained"
    assert [s.name for s in chain.strategies] == ["strict", "shifted", "greedy"]


def test_optimized_strategy_order():
    with_fuzz = PatchStrategyFactory.create_optimized_strategy(2)
    without_fuzz = PatchStrategyFactory.create_optimized_strategy(0)

    assert with_fuzz.name == "optimized-chained"
    assert [s.name for s in with_fuzz.strategies] == ["strict", "shifted", "optimized-greedy"]
    assert [s.name for s in without_fuzz.strategies] == ["strict", "optimized-greedy"]


def test_single_strategy_factories():
    assert PatchStrategyFactory.create_strict_strategy().name == "strict"
    assert PatchStrategyFactory.create_shifted_strategy(1).fuzz_factor == 1
    assert PatchStrategyFactory.create_greedy_strategy().name == "optimized-greedy"
    assert PatchStrategyFactory.create_greedy_strategy(optimized=False).name == "greedy"


def test_chain_prefers_strict(diff_maker):
    patch = parse_patch(diff_maker(FUNCTION, FUNCTION_PATCHED))[0]

    result = PatchStrategyFactory.create_default_strategy(2).apply(FUNCTION, patch)

    assert result.success
    assert result.strategy_name == "strict"
    assert result.attempted_strategies == ("strict",)


def test_chain_falls_back_to_shifted(diff_maker):
    patch = parse_patch(diff_maker(FUNCTION, FUNCTION_PATCHED))[0]

    result = PatchStrategyFactory.create_default_strategy(2).apply("# one\n# two\n" + FUNCTION, patch)

    assert result.success
    assert result.strategy_name == "shifted"
    assert result.attempted_strategies == ("strict", "shifted")


def test_chain_falls_back_to_greedy():
    patch = parse_patch(STALE_CONTEXT_DIFF)[0]

    result = PatchStrategyFactory.create_default_strategy(2).apply("a\nb\nc\nd\n", patch)

    assert result.success
    assert result.strategy_name == "greedy"
    assert result.patched_text == "a\nB\nc\nd\n"
    assert result.attempted_strategies == ("strict", "shifted", "greedy")


def test_chain_failure_returns_original_content():
    patch = parse_patch(STALE_CONTEXT_DIFF)[0]
    content = "nothing\nto\nsee\n"

    result = PatchStrategyFactory.create_default_strategy(2).apply(content, patch)

    assert not result.success
    assert result.patched_text == content
    assert result.strategy_name is None
    assert result.attempted_strategies == ("strict", "shifted", "greedy")


def test_nested_chain_flattens_attempted_names():
    patch = parse_patch(STALE_CONTEXT_DIFF)[0]
    chain = ChainedPatchStrategy([ChainedPatchStrategy([StrictStrategy()]), GreedyStrategy()])

    result = chain.apply("x\n", patch)

    assert result.attempted_strategies == ("strict", "greedy")


def test_empty_chain_fails():
    patch = parse_patch(STALE_CONTEXT_DIFF)[0]
    result = ChainedPatchStrategy([]).apply("a\n", patch)

    assert not result.success
    assert result.attempted_strategies == ()


def test_small_patch_detection(large_patch):
    small = large_patch.clone()
    small.hunks = small.hunks[:4]

    assert OptimizedChainedStrategy.is_small_patch(small)
    assert not OptimizedChainedStrategy.is_small_patch(large_patch)


def test_adaptive_uses_strict_when_first_hunk_matches(large_file, large_file_patched, large_patch):
    result = PatchStrategyFactory.create_optimized_strategy(2).apply(large_file, large_patch)

    assert result.success
    assert result.strategy_name == "strict"
    assert result.patched_text == large_file_patched


def test_adaptive_uses_shifted_for_offset_file(large_file, large_file_patched, large_patch):
    result = PatchStrategyFactory.create_optimized_strategy(2).apply("# a\n# b\n" + large_file, large_patch)

    assert result.success
    assert result.strategy_name == "shifted"
    assert result.attempted_strategies == ("strict", "shifted")
    assert result.patched_text == "# a\n# b\n" + large_file_patched


def test_adaptive_falls_back_to_optimized_greedy(large_file, large_file_patched, large_patch):
    patch = with_stale_first_hunk(large_patch)

    result = PatchStrategyFactory.create_optimized_strategy(2).apply(large_file, patch)

    assert result.success
    assert result.strategy_name == "optimized-greedy"
    assert result.attempted_strategies == ("strict", "shifted", "optimized-greedy")
    assert result.patched_text == large_file_patched


def test_adaptive_does_not_mutate_the_patch(large_file, large_patch):
    patch = with_stale_first_hunk(large_patch)
    snapshot = patch.clone()

    PatchStrategyFactory.create_optimized_strategy(2).apply(large_file, patch)

    assert patch == snapshot


def test_performance_wrapper_routes_by_size(large_file, large_patch, diff_maker):
    wrapper = use_optimized_strategies(PatchStrategyFactory.create_default_strategy(2), 2)
    assert wrapper.name == "performance-optimized"

    # Small patch: the standard chain runs every strategy in turn
    small = parse_patch(STALE_CONTEXT_DIFF)[0]
    small_result = wrapper.apply("a\nb\nc\nd\n", small)
    assert small_result.strategy_name == "greedy"

    # Large patch: the optimized chain reports its own greedy strategy
    large_result = wrapper.apply(large_file, with_stale_first_hunk(large_patch))
    assert large_result.strategy_name == "optimized-greedy"


def test_apply_patch_to_content_small_patch(diff_maker):
    patch = parse_patch(diff_maker(FUNCTION, FUNCTION_PATCHED))[0]

    result = apply_patch_to_content(FUNCTION, patch, 2)

    assert result.patched_text == FUNCTION_PATCHED
    assert result.strategy_name == "strict"


def test_apply_patch_to_content_large_patch(large_file, large_file_patched, large_patch):
    result = apply_patch_to_content(large_file, with_stale_first_hunk(large_patch), 2)

    assert result.success
    assert result.patched_text == large_file_patched
    assert result.strategy_name == "optimized-greedy"


def test_apply_patch_to_content_rejects_malformed_patches():
    with pytest.raises(MalformedPatchError):
        apply_patch_to_content("a\n", ParsedPatch("a/f", "b/f", []), 2)
    with pytest.raises(MalformedPatchError):
        apply_patch_to_content("a\n", ParsedPatch("a/f", "b/f", [Hunk(1, 0, 1, 0, [])]), 2)
    with pytest.raises(MalformedPatchError):
        apply_patch_to_content("a\n", ParsedPatch("a/f", "b/f", [
            Hunk(-1, 1, 1, 1, [HunkLine(LineType.CONTEXT, "a")])]), 2)


def test_apply_patch_to_content_rejects_bad_fuzz(diff_maker):
    patch = parse_patch(diff_maker(FUNCTION, FUNCTION_PATCHED))[0]
    with pytest.raises(ValueError):
        apply_patch_to_content(FUNCTION, patch, 7)


def test_apply_state_values():
    assert [state.value for state in ApplyState] == ["not_tried", "trying", "succeeded", "failed"]
