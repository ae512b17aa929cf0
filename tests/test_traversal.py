import pytest

from lazy import EMPTY, cons, count_from, empty, of


class TestFoldRight:
    """Test the structural right fold"""

    def test_sum(self):
        assert of(1, 2, 3, 4).fold_right(0, lambda x, rest: x + rest()) == 10

    def test_order_is_right_associative(self):
        result = of(1, 2, 3).fold_right("", lambda x, rest: f"{x}, {rest()}")
        assert result == "1, 2, 3, "

    def test_empty_returns_zero(self):
        assert empty().fold_right("zero", lambda x, rest: "other") == "zero"

    def test_ignoring_rest_stops_recursion(self, trap_stream):
        """combine that never calls rest visits only the head"""
        assert trap_stream.fold_right(None, lambda x, _rest: x) == 1


class TestExistsForAll:
    """Test short-circuiting queries"""

    def test_concrete_scenarios(self):
        assert of(1, 2, 3).exists(lambda x: x > 2) is True
        assert of(1, 2, 3).for_all(lambda x: x > 0) is True
        assert of(1, 2, 3).for_all(lambda x: x > 1) is False

    def test_exists_no_match(self):
        assert of(1, 2, 3).exists(lambda x: x > 5) is False
        assert empty().exists(lambda x: True) is False

    def test_for_all_on_empty_is_true(self):
        assert empty().for_all(lambda x: False) is True

    def test_exists_does_not_force_tail_after_match(self, trap_stream):
        assert trap_stream.exists(lambda x: x == 1)
        assert trap_stream.exists(lambda x: x == 2)

    def test_for_all_stops_at_first_failure(self, trap_stream):
        assert not trap_stream.for_all(lambda x: x < 2)

    def test_exists_on_infinite_stream(self):
        assert count_from(1).exists(lambda x: x == 50)

    def test_only_needed_heads_are_evaluated(self, counted):
        stream, evaluated = counted(1, 2, 3, 4, 5)
        assert stream.exists(lambda x: x == 2)
        assert evaluated == [1, 2]


class TestFind:
    """Test linear search"""

    def test_found(self):
        assert of(1, 2, 3, 4).find(lambda x: x % 2 == 0) == 2

    def test_absent_returns_default(self):
        assert of(1, 3).find(lambda x: x % 2 == 0) is None
        assert of(1, 3).find(lambda x: x % 2 == 0, default=-1) == -1
        assert empty().find(lambda x: True, default="none") == "none"

    def test_stops_at_match(self, trap_stream):
        assert trap_stream.find(lambda x: x == 2) == 2

    def test_long_stream_is_stack_safe(self):
        assert count_from(0).find(lambda x: x == 50000) == 50000


class TestHeadOption:
    def test_present(self, trap_stream):
        assert trap_stream.head_option() == 1

    def test_absent(self):
        assert empty().head_option() is None
        assert empty().head_option(default=0) == 0

    def test_forces_only_head(self, counted):
        stream, evaluated = counted(1, 2, 3)
        assert stream.head_option() == 1
        assert evaluated == [1]


class TestTake:
    """Test bounded prefixes"""

    def test_concrete_scenario(self):
        assert of(1, 2, 3, 4, 5).take(2).to_list() == [1, 2]

    @pytest.mark.parametrize("n", [0, 1, 3, 5, 8])
    def test_prefix_length(self, n):
        items = [10, 20, 30, 40, 50]
        assert of(*items).take(n).to_list() == items[:min(n, len(items))]

    def test_take_zero_forces_nothing(self, forbidden):
        assert cons(forbidden, forbidden).take(0) is EMPTY

    def test_negative_counts_as_zero(self):
        assert of(1, 2).take(-3) is EMPTY

    def test_take_on_empty(self):
        assert empty().take(3) is EMPTY

    def test_does_not_force_element_after_prefix(self, trap_stream):
        """Forcing the whole prefix never reaches the trap tail"""
        assert trap_stream.take(2).to_list() == [1, 2]

    def test_heads_evaluated_only_when_read(self, counted):
        stream, evaluated = counted(1, 2, 3, 4)
        prefix = stream.take(3)
        assert evaluated == []
        assert prefix.drop(2).head_option() == 3
        assert evaluated == [3], f"Only the read head should be evaluated, got {evaluated}"

    def test_take_from_infinite(self):
        assert count_from(1).take(3).to_list() == [1, 2, 3]


class TestDrop:
    """Test skipping"""

    def test_concrete_scenario(self):
        assert of(1, 2, 3).drop(1).to_list() == [2, 3]

    def test_beyond_end(self):
        assert of(1, 2).drop(5) is EMPTY

    def test_zero_and_negative_return_receiver(self):
        stream = of(1, 2)
        assert stream.drop(0) is stream
        assert stream.drop(-1) is stream

    def test_drop_does_not_evaluate_heads(self, counted):
        stream, evaluated = counted(1, 2, 3)
        assert stream.drop(2).to_list() == [3]
        assert evaluated == [3]

    def test_drop_then_take_recombines(self):
        items = [1, 2, 3, 4, 5, 6]
        stream = of(*items)
        for n in range(len(items) + 1):
            remaining = len(items) - n
            assert stream.take(n).to_list() + stream.drop(n).take(remaining).to_list() == items

    def test_long_drop_is_stack_safe(self):
        assert count_from(0).drop(100000).head_option() == 100000


class TestTakeWhile:
    """Test conditional prefixes"""

    @pytest.mark.parametrize("items,limit", [
        ([1, 2, 3, 4, 1], 3),
        ([5, 6], 3),
        ([], 3),
        ([1, 2], 10),
    ])
    def test_both_implementations_agree(self, items, limit):
        stream = of(*items)
        direct = stream.take_while(lambda x: x < limit).to_list()
        folded = stream.take_while_via_fold(lambda x: x < limit).to_list()
        expected = []
        for x in items:
            if not x < limit:
                break
            expected.append(x)
        assert direct == folded == expected

    def test_lazy_on_infinite_stream(self):
        assert count_from(1).take_while(lambda x: x < 4).to_list() == [1, 2, 3]
        assert count_from(1).take_while_via_fold(lambda x: x < 4).to_list() == [1, 2, 3]

    def test_tail_not_forced_until_needed(self, trap_stream):
        """Building the prefix looks at the first element only"""
        direct = trap_stream.take_while(lambda x: x < 5)
        folded = trap_stream.take_while_via_fold(lambda x: x < 5)
        assert direct.head() == 1
        assert folded.head() == 1

    def test_stops_before_trap(self, trap_stream):
        assert trap_stream.take_while(lambda x: x < 2).to_list() == [1]
        assert trap_stream.take_while_via_fold(lambda x: x < 2).to_list() == [1]


class TestToList:
    """Test materialization"""

    def test_round_trip(self):
        for items in ([], [1], [1, 2, 3], ["a", None, 3.5]):
            assert of(*items).to_list() == items
            assert of(*items).to_list_recursive() == items

    def test_iteration(self):
        assert list(of(1, 2, 3)) == [1, 2, 3]
        assert [x for x in empty()] == []
