"""
Tests for the MarkovChain API.

These tests verify:
1. Construction rejects unusable configurations
2. Training accumulates and probabilities are weight ratios
3. Untrained contexts yield None / 0.0 instead of errors
4. Partial-context generation marginalizes wildcard slots
5. Deterministic generation is a pure function of state and rank
6. The linear, branching and order-0 scenarios behave as expected
"""

import random

import pytest

from markovr import (
    UNKNOWN,
    ErrorKind,
    InvalidConfiguration,
    InvalidDraw,
    InvalidOutcome,
    InvalidWeight,
    Known,
    MalformedContext,
    MarkovChain,
    MarkovError,
    ResolutionMode,
)


ALPHABET = "abcdefghijklmnopqrstuvwxyz"


# =============================================================================
# TEST FIXTURES
# =============================================================================

def make_alphabet_chain(order: int = 1) -> MarkovChain:
    """Helper: a chain where each letter follows its predecessors."""
    chain = MarkovChain(order, rng=random.Random(0))
    for i in range(order, len(ALPHABET)):
        chain.train(list(ALPHABET[i - order:i]), ALPHABET[i], 1)
    return chain


# =============================================================================
# CONSTRUCTION TESTS
# =============================================================================

class TestConstruction:
    """Test configuration validation."""

    def test_valid_configuration(self):
        """Wildcards are stored sorted."""
        chain = MarkovChain(3, [2, 0])
        assert chain.order == 3
        assert chain.wildcard_dimensions == (0, 2)
        assert len(chain) == 0

    def test_wildcard_out_of_range(self):
        """Wildcard index must be below the order."""
        with pytest.raises(InvalidConfiguration, match="outside"):
            MarkovChain(2, [2])

    def test_negative_wildcard(self):
        """Negative indices are out of range too."""
        with pytest.raises(InvalidConfiguration):
            MarkovChain(2, [-1])

    def test_duplicate_wildcards(self):
        """Duplicated wildcard indices are rejected."""
        with pytest.raises(InvalidConfiguration, match="duplicates"):
            MarkovChain(3, [1, 1])

    def test_negative_order(self):
        """Order must be non-negative."""
        with pytest.raises(InvalidConfiguration):
            MarkovChain(-1)

    def test_non_int_order(self):
        """Order must be an int."""
        with pytest.raises(InvalidConfiguration):
            MarkovChain(1.0)

    def test_wildcard_on_order_zero(self):
        """An order-0 chain has no slots to wildcard."""
        with pytest.raises(InvalidConfiguration):
            MarkovChain(0, [0])

    def test_errors_share_base_and_kind(self):
        """Every engine error is a MarkovError with a kind."""
        with pytest.raises(MarkovError) as exc:
            MarkovChain(1, [5])
        assert exc.value.kind == ErrorKind.INVALID_CONFIGURATION
        assert str(exc.value).startswith("[invalid_configuration]")

    def test_base_error_has_no_kind(self):
        """A bare MarkovError is not labelled with a subclass kind."""
        error = MarkovError("something went wrong")
        assert error.kind is None
        assert str(error) == "something went wrong"

    def test_base_error_accepts_explicit_kind(self):
        """An explicit kind is rendered in the message."""
        error = MarkovError("bad weight", ErrorKind.INVALID_WEIGHT)
        assert error.kind == ErrorKind.INVALID_WEIGHT
        assert str(error) == "[invalid_weight] bad weight"


# =============================================================================
# EMPTY CHAIN TESTS
# =============================================================================

class TestEmpty:
    """Untrained chains answer with absence, not errors."""

    @pytest.mark.parametrize("order", [0, 1, 2])
    def test_generate_none(self, order):
        """Nothing trained: generate returns None."""
        chain = MarkovChain(order)
        context = [1] * order
        assert chain.generate(context) is None
        assert chain.generate_deterministic(context, 33) is None
        assert chain.generate_from_draw(context, 33) is None

    def test_probability_zero(self):
        """Nothing trained: probability is 0."""
        chain = MarkovChain(2, [0])
        assert chain.probability(["a", "b"], "c") == 0.0
        assert chain.probability([UNKNOWN, "b"], "c") == 0.0
        assert chain.generate_from_partial([UNKNOWN, "b"]) is None


# =============================================================================
# TRAINING TESTS
# =============================================================================

class TestTrain:
    """Test training semantics and validation."""

    def test_probability_is_weight_ratio(self):
        """probability = weight / total for the context."""
        chain = MarkovChain(1)
        chain.train(["x"], "p", 3)
        chain.train(["x"], "q", 1)

        assert chain.probability(["x"], "p") == 0.75
        assert chain.probability(["x"], "q") == 0.25

    def test_unrelated_training_keeps_ratio(self):
        """Training other contexts does not disturb a context's ratios."""
        chain = MarkovChain(1)
        chain.train(["x"], "p", 3)
        chain.train(["x"], "q", 1)
        chain.train(["y"], "p", 100)
        chain.train(["z"], "q", 7)

        assert chain.probability(["x"], "p") == 0.75

    def test_training_twice_accumulates(self):
        """The same triple twice adds twice the weight."""
        chain = MarkovChain(1)
        chain.train(["x"], "p", 2)
        chain.train(["x"], "p", 2)
        chain.train(["x"], "q", 4)

        assert chain.distribution_for(["x"]).weight_of("p") == 4
        assert chain.probability(["x"], "p") == 0.5

    def test_default_weight_is_one(self):
        """Omitted weight counts as one observation."""
        chain = MarkovChain(1)
        chain.train(["x"], "p")
        assert chain.distribution_for(["x"]).weight_of("p") == 1

    def test_wrong_length_rejected(self):
        """Training windows must be exactly `order` long."""
        chain = MarkovChain(2)
        with pytest.raises(MalformedContext):
            chain.train(["a"], "b", 1)
        with pytest.raises(MalformedContext):
            chain.train(["a", "b", "c"], "d", 1)

    def test_unknown_slot_rejected(self):
        """Training windows must be fully known."""
        chain = MarkovChain(2, [0])
        with pytest.raises(MalformedContext):
            chain.train([UNKNOWN, "b"], "c", 1)
        with pytest.raises(MalformedContext):
            chain.train([None, "b"], "c", 1)

    def test_invalid_weight_rejected(self):
        """Zero and negative weights are InvalidWeight."""
        chain = MarkovChain(1)
        with pytest.raises(InvalidWeight):
            chain.train(["a"], "b", 0)
        with pytest.raises(InvalidWeight):
            chain.train(["a"], "b", -3)
        assert len(chain) == 0

    def test_none_outcome_rejected(self):
        """None cannot be trained as an outcome."""
        with pytest.raises(InvalidOutcome):
            MarkovChain(1).train(["a"], None, 1)

    def test_train_sequence(self):
        """Every window of a sequence trains onto its successor."""
        chain = MarkovChain(2)
        trained = chain.train_sequence("abcabd")

        assert trained == 4
        assert chain.probability(["a", "b"], "c") == 0.5
        assert chain.probability(["a", "b"], "a") == 0.0
        assert chain.probability(["b", "c"], "a") == 1.0

    def test_train_sequence_too_short(self):
        """Sequences no longer than the order train nothing."""
        chain = MarkovChain(3)
        assert chain.train_sequence("abc") == 0
        assert len(chain) == 0

    def test_tuple_elements(self):
        """Any hashable value works as an element."""
        chain = MarkovChain(1)
        chain.train([(0, 0)], (0, 1), 1)
        assert chain.generate([(0, 0)]) == (0, 1)


# =============================================================================
# GENERATION SCENARIO TESTS
# =============================================================================

class TestLinearChain:
    """The alphabet scenario."""

    def test_first_order_predicts_next_letter(self):
        """Each letter deterministically yields the next."""
        chain = make_alphabet_chain(1)
        for i in range(len(ALPHABET) - 1):
            assert chain.generate([ALPHABET[i]]) == ALPHABET[i + 1]

    def test_second_order_predicts_next_letter(self):
        """Two-letter windows also yield the next letter."""
        chain = make_alphabet_chain(2)
        for i in range(1, len(ALPHABET) - 1):
            context = [ALPHABET[i - 1], ALPHABET[i]]
            assert chain.generate(context) == ALPHABET[i + 1]

    def test_probabilities(self):
        """P(z|y) = 1 and P(z|a) = 0."""
        chain = make_alphabet_chain(1)
        assert chain.probability(["y"], "z") == 1.0
        assert chain.probability(["a"], "z") == 0.0

    def test_walk_ends_after_z(self):
        """Iterating from 'a' spells the alphabet then stops."""
        chain = make_alphabet_chain(1)
        letters = ["a"]
        while True:
            nxt = chain.generate([letters[-1]])
            if nxt is None:
                break
            letters.append(nxt)
        assert "".join(letters) == ALPHABET


class TestBranchingChain:
    """The ambiguous-branch scenario."""

    def test_sample_frequency_matches_weights(self):
        """P is drawn about three times as often as Q."""
        chain = MarkovChain(1, rng=random.Random(20240101))
        chain.train(["X"], "P", 3)
        chain.train(["X"], "Q", 1)

        samples = [chain.generate(["X"]) for _ in range(4000)]

        assert set(samples) == {"P", "Q"}
        assert samples.count("P") / len(samples) == pytest.approx(0.75, abs=0.03)

    def test_seeded_rng_is_reproducible(self):
        """Two chains with equal seeds generate identical streams."""
        def run():
            chain = MarkovChain(1, rng=random.Random(5))
            chain.train(["X"], "P", 3)
            chain.train(["X"], "Q", 1)
            return [chain.generate(["X"]) for _ in range(50)]

        assert run() == run()

    def test_generate_from_draw(self):
        """Explicit draws land in cumulative buckets and roll over."""
        chain = MarkovChain(1)
        chain.train(["X"], "P", 3)
        chain.train(["X"], "Q", 1)

        assert [chain.generate_from_draw(["X"], d) for d in range(5)] == [
            "P", "P", "P", "Q", "P",
        ]

    def test_negative_draw_rejected(self):
        """A negative draw is InvalidDraw, trained window or not."""
        chain = MarkovChain(1)
        chain.train(["X"], "P", 3)

        with pytest.raises(InvalidDraw):
            chain.generate_from_draw(["X"], -1)
        with pytest.raises(InvalidDraw):
            chain.generate_from_draw(["never"], -1)


class TestOrderZero:
    """The degenerate weighted-die case."""

    def test_single_global_distribution(self):
        """Every query hits the one empty-window distribution."""
        chain = MarkovChain(0, rng=random.Random(3))
        chain.train([], "heads", 1)
        chain.train([], "tails", 3)

        assert len(chain) == 1
        assert chain.probability([], "tails") == 0.75
        assert chain.generate([]) in {"heads", "tails"}
        assert chain.generate_deterministic([], 0) == "tails"

    def test_train_sequence_counts_elements(self):
        """Order-0 sequence training is a histogram."""
        chain = MarkovChain(0)
        chain.train_sequence("aab")
        assert chain.probability([], "a") == pytest.approx(2 / 3)

    def test_sliding_window_ignores_any_input(self):
        """With sliding_window, order 0 ignores whatever context is passed."""
        chain = MarkovChain(0, sliding_window=True)
        chain.train(["ignored"], "x", 1)
        assert chain.generate([1, 2, 3]) == "x"
        assert chain.probability(["anything"], "x") == 1.0


# =============================================================================
# PARTIAL CONTEXT TESTS
# =============================================================================

class TestPartialContext:
    """Test wildcard resolution through the chain API."""

    def test_marginal_probability(self):
        """[A,B]->X and [A,C]->X give P(X | A,?) = 1."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)
        chain.train(["A", "C"], "X", 1)

        assert chain.probability(["A", UNKNOWN], "X") == 1.0
        assert chain.generate_from_partial(["A", UNKNOWN]) == "X"

    def test_marginal_mixes_outcomes(self):
        """Aggregated weights decide the marginal probabilities."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)
        chain.train(["A", "C"], "Y", 3)

        assert chain.probability(["A", UNKNOWN], "Y") == 0.75
        assert chain.probability(["A", "B"], "Y") == 0.0

    def test_resolution_report(self):
        """resolve() says how the window was answered."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)
        chain.train(["A", "C"], "X", 1)

        assert chain.resolve(["A", "B"]).mode == ResolutionMode.EXACT
        assert chain.resolve(["A", UNKNOWN]).mode == ResolutionMode.MARGINAL
        assert chain.resolve(["A", UNKNOWN]).matched == 2
        assert chain.resolve(["Z", UNKNOWN]).mode == ResolutionMode.NO_DATA

    def test_generate_widens_on_exact_miss(self):
        """A fully known but untrained window uses the marginal."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)

        assert chain.generate(["A", "never"]) == "X"
        assert chain.generate(["Z", "B"]) is None

    def test_generate_requires_known_slots(self):
        """generate() is the fully-known form."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)
        with pytest.raises(MalformedContext):
            chain.generate(["A", UNKNOWN])

    def test_unknown_outside_wildcards_rejected(self):
        """UNKNOWN in a fixed slot is a caller error, not 'no data'."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "X", 1)
        with pytest.raises(MalformedContext):
            chain.generate_from_partial([UNKNOWN, "B"])
        with pytest.raises(MalformedContext):
            chain.probability([UNKNOWN, "B"], "X")

    def test_known_none_is_a_value(self):
        """Known(None) trains and generates like any other element."""
        chain = MarkovChain(1)
        chain.train([Known(None)], "x", 1)

        assert chain.probability([Known(None)], "x") == 1.0
        assert chain.generate([Known(None)]) == "x"
        assert chain.generate_from_partial([Known(None)]) == "x"
        assert chain.generate_deterministic([Known(None)]) == "x"
        assert chain.distribution_for([Known(None)]).weight_of("x") == 1

    def test_known_none_in_wildcard_slot_resolves_exactly(self):
        """Known(None) in a wildcard slot is an exact hit, not a marginal."""
        chain = MarkovChain(2, [0], rng=random.Random(2))
        chain.train([Known(None), "a"], "x", 1)
        chain.train(["b", "a"], "y", 1)

        assert chain.resolve([Known(None), "a"]).mode == ResolutionMode.EXACT
        assert {chain.generate([Known(None), "a"]) for _ in range(50)} == {"x"}
        assert chain.probability([UNKNOWN, "a"], "y") == 0.5

    def test_wrong_query_length_rejected(self):
        """Query windows must match the order."""
        chain = MarkovChain(2, [1])
        with pytest.raises(MalformedContext):
            chain.generate_from_partial(["A"])


# =============================================================================
# DETERMINISTIC GENERATION TESTS
# =============================================================================

class TestDeterministic:
    """Test rank-based generation."""

    def test_pure_function_of_state(self):
        """Identical state and rank give identical output."""
        chain = MarkovChain(1)
        chain.train(["x"], "a", 2)
        chain.train(["x"], "b", 5)
        chain.train(["x"], "c", 1)

        assert chain.generate_deterministic(["x"], 1) == chain.generate_deterministic(["x"], 1)
        assert [chain.generate_deterministic(["x"], r) for r in range(3)] == ["b", "a", "c"]

    def test_marginal_ties_follow_first_seen(self):
        """Equal aggregate weights rank in training order."""
        chain = MarkovChain(2, [1])
        chain.train(["A", "B"], "late", 1)
        chain.train(["A", "C"], "early", 1)
        chain.train(["A", "C"], "late", 1)
        chain.train(["A", "B"], "early", 1)

        assert chain.generate_deterministic(["A", UNKNOWN], 0) == "late"
        assert chain.generate_deterministic(["A", UNKNOWN], 1) == "early"


# =============================================================================
# EQUALITY TESTS
# =============================================================================

class TestEquality:
    """Test structural equality of chains."""

    def test_training_order_does_not_matter(self):
        """Forward and reverse training give equal chains."""
        forward = MarkovChain(1)
        backward = MarkovChain(1)
        for i in range(1, len(ALPHABET)):
            forward.train([ALPHABET[i - 1]], ALPHABET[i], 1)
            rev = len(ALPHABET) - i
            backward.train([ALPHABET[rev - 1]], ALPHABET[rev], 1)

        assert forward == backward

    def test_config_matters(self):
        """Same data under different wildcards is a different chain."""
        plain = MarkovChain(1)
        wild = MarkovChain(1, [0])
        plain.train(["a"], "b", 1)
        wild.train(["a"], "b", 1)

        assert plain != wild
