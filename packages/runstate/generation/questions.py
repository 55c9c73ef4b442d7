"""
Math question generator for gates, hallway quizzes and the exam ladder.

Questions are a pure function of the RNG stream and a difficulty tier, so a
scoped RNG always reproduces the same question for the same node.

Kinds:
- Integer drills: ARITH, ONE_STEP, TWO_STEP, LINEAR_VALUE
- Data sets: MEAN (2 decimals), MEDIAN, MODE, BOXPLOT_READ
- Data literacy (numbered choices): TRUNCATED_AXIS, CORRELATION_CAUSATION
- Scatter plots: PREDICT from a least-squares line (2 decimals)
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..state.rng import RNG, pick, rand_int

Number = Union[int, float]

INTEGER_KINDS = ("ARITH", "ONE_STEP", "TWO_STEP", "LINEAR_VALUE")
DATA_KINDS = ("MEAN", "MEDIAN", "MODE", "BOXPLOT_READ")
LITERACY_KINDS = ("TRUNCATED_AXIS", "CORRELATION_CAUSATION")

QUESTION_KINDS_BY_DIFFICULTY: Dict[int, Tuple[str, ...]] = {
    1: INTEGER_KINDS + DATA_KINDS + ("TRUNCATED_AXIS",),
    2: INTEGER_KINDS + DATA_KINDS + LITERACY_KINDS + ("PREDICT",),
    3: INTEGER_KINDS + DATA_KINDS + LITERACY_KINDS + ("PREDICT",),
}
QUESTION_KINDS = QUESTION_KINDS_BY_DIFFICULTY[3]

DIFFICULTY_SCALE = {1: 10, 2: 20, 3: 50}

# Data set length range and value ceiling per tier
DATASET_SHAPE = {1: (7, 9, 30), 2: (9, 11, 60), 3: (11, 13, 100)}

DECIMAL_TOLERANCE = 0.01


@dataclass(frozen=True)
class Question:
    id: str
    prompt: str
    answer: Number
    hint: str
    difficulty: int
    tags: Tuple[str, ...] = ()
    # Numbered options; ``answer`` is the 1-based index of the right one
    choices: Tuple[str, ...] = ()
    dataset: Tuple[Number, ...] = ()
    tolerance: float = 0.0

    @property
    def is_choice(self) -> bool:
        return bool(self.choices)

    @property
    def display_answer(self) -> str:
        if self.is_choice:
            return f"{self.answer}) {self.choices[int(self.answer) - 1]}"
        return format_number(self.answer)

    def check(self, given) -> bool:
        """True when ``given`` matches the answer.

        Numbers are compared within ``tolerance``; choice questions also
        accept the text of the right option.
        """
        if given is None or isinstance(given, bool):
            return False
        text = str(given).strip()
        if self.is_choice and text.lower() == self.choices[int(self.answer) - 1].lower():
            return True
        try:
            value = float(text)
        except ValueError:
            return False
        if not math.isfinite(value):
            return False
        return abs(value - self.answer) <= self.tolerance + 1e-9


def difficulty_for_depth(depth: int) -> int:
    """1 for depths <= 4, 2 for <= 9, 3 beyond."""
    if depth <= 4:
        return 1
    if depth <= 9:
        return 2
    return 3


# =============================================================================
# NUMBER HELPERS
# =============================================================================


def normalize_number(value: float) -> Number:
    """Round to 2 decimals and drop a trailing ``.0``."""
    value = round(float(value), 2)
    return int(value) if value.is_integer() else value


def format_number(value: Number) -> str:
    return str(normalize_number(value))


def format_data(values: Sequence[Number]) -> str:
    return ", ".join(format_number(v) for v in values)


def unique_mode(values: Sequence[Number]) -> Optional[Number]:
    """The single most frequent value, or None when nothing repeats or modes tie."""
    counts = Counter(values).most_common()
    if not counts or counts[0][1] <= 1:
        return None
    if len(counts) > 1 and counts[1][1] == counts[0][1]:
        return None
    return counts[0][0]


def five_number_summary(values: Sequence[Number]) -> Tuple[Number, Number, Number, Number, Number]:
    """(min, Q1, median, Q3, max); quartiles are medians of the halves excluding the middle value."""
    data = sorted(values)
    n = len(data)
    half = n // 2
    lower = data[:half]
    upper = data[half + 1:] if n % 2 else data[half:]
    q1 = float(np.median(lower)) if lower else data[0]
    q3 = float(np.median(upper)) if upper else data[-1]
    return (
        normalize_number(data[0]),
        normalize_number(q1),
        normalize_number(float(np.median(data))),
        normalize_number(q3),
        normalize_number(data[-1]),
    )


def choice_prompt(stem: str, options: Sequence[str]) -> str:
    lines = ["Enter the number."] + [f"{i + 1}) {option}" for i, option in enumerate(options)]
    return stem + "\n\n" + "\n".join(lines)


def make_dataset(rng: RNG, difficulty: int) -> List[int]:
    lo_len, hi_len, ceiling = DATASET_SHAPE.get(difficulty, DATASET_SHAPE[3])
    data = [rand_int(rng, 0, ceiling) for _ in range(rand_int(rng, lo_len, hi_len))]
    # Repeat one value so MODE has something to find
    if pick(rng, (True, False, False)):
        data.append(data[rand_int(rng, 0, len(data) - 1)])
    return data


# =============================================================================
# GENERATORS
# =============================================================================


def _integer_question(rng: RNG, kind: str, difficulty: int) -> Question:
    scale = DIFFICULTY_SCALE.get(difficulty, DIFFICULTY_SCALE[3])

    if kind == "ARITH":
        a = rand_int(rng, 1, scale)
        b = rand_int(rng, 1, scale)
        op = pick(rng, ("+", "-"))
        answer = a + b if op == "+" else a - b
        return Question(
            id=f"arith:{a}{op}{b}",
            prompt=f"{a} {op} {b} = ?",
            answer=answer,
            hint="Work carefully with signs.",
            difficulty=difficulty,
            tags=("arithmetic",),
        )

    if kind == "ONE_STEP":
        x = rand_int(rng, -10, 10)
        b = rand_int(rng, -10, 10)
        return Question(
            id=f"one_step:{x}:{b}",
            prompt=f"Solve for x:  x + ({b}) = {x + b}",
            answer=x,
            hint="Undo the +b by subtracting b from both sides.",
            difficulty=difficulty,
            tags=("equations", "one-step"),
        )

    if kind == "TWO_STEP":
        a = pick(rng, (2, 3, 4, 5, -2, -3))
        x = rand_int(rng, -6, 6)
        b = rand_int(rng, -12, 12)
        return Question(
            id=f"two_step:{a}:{x}:{b}",
            prompt=f"Solve for x:  {a}x + ({b}) = {a * x + b}",
            answer=x,
            hint="Undo +b first, then divide by a.",
            difficulty=difficulty,
            tags=("equations", "two-step"),
        )

    m = pick(rng, (-3, -2, -1, 1, 2, 3, 4))
    b = rand_int(rng, -10, 10)
    k = rand_int(rng, -5, 5)
    return Question(
        id=f"linear:{m}:{b}:{k}",
        prompt=f"Given y = {m}x + {b}, what is y when x = {k}?",
        answer=m * k + b,
        hint="Substitute x, then multiply m*x and add b.",
        difficulty=difficulty,
        tags=("linear-relations",),
    )


def _data_question(rng: RNG, kind: str, difficulty: int) -> Question:
    data = make_dataset(rng, difficulty)
    while kind == "MODE" and unique_mode(data) is None:
        data.append(data[0])
    base = f"Data set: {format_data(data)}"
    key = "-".join(str(v) for v in data)

    if kind == "MEAN":
        return Question(
            id=f"mean:{key}",
            prompt=f"{base}\n\nWhat is the mean? (Round to 2 decimals)",
            answer=normalize_number(np.mean(data)),
            hint="Add all values, then divide by how many values there are.",
            difficulty=difficulty,
            tags=("statistics", "mean"),
            dataset=tuple(data),
            tolerance=DECIMAL_TOLERANCE,
        )

    if kind == "MEDIAN":
        return Question(
            id=f"median:{key}",
            prompt=f"{base}\n\nWhat is the median?",
            answer=normalize_number(np.median(data)),
            hint="Order the values; the median is the middle value (or the average of the two middle values).",
            difficulty=difficulty,
            tags=("statistics", "median"),
            dataset=tuple(data),
        )

    if kind == "MODE":
        return Question(
            id=f"mode:{key}",
            prompt=f"{base}\n\nWhat is the mode?",
            answer=unique_mode(data),
            hint="The mode is the value that appears most often.",
            difficulty=difficulty,
            tags=("statistics", "mode"),
            dataset=tuple(data),
        )

    summary = five_number_summary(data)
    low, q1, median, q3, high = (format_number(v) for v in summary)
    labels = (
        ("minimum", "The minimum is the left whisker end."),
        ("Quartile 1 (Q1)", "Q1 is the left edge of the box."),
        ("median", "The median is the line inside the box."),
        ("Quartile 3 (Q3)", "Q3 is the right edge of the box."),
        ("maximum", "The maximum is the right whisker end."),
    )
    index = rand_int(rng, 0, 4)
    label, hint = labels[index]
    return Question(
        id=f"boxplot:{index}:{key}",
        prompt=(
            f"A box plot has whiskers from {low} to {high}, a box from {q1} to {q3} "
            f"and a line inside the box at {median}.\n\nWhat is the {label}?"
        ),
        answer=summary[index],
        hint=hint,
        difficulty=difficulty,
        tags=("statistics", "boxplot"),
        dataset=tuple(data),
    )


def _literacy_question(rng: RNG, kind: str, difficulty: int) -> Question:
    if kind == "TRUNCATED_AXIS":
        start = rand_int(rng, 40, 90)
        before = start + rand_int(rng, 1, 3)
        after = before + rand_int(rng, 1, 3)
        stem = (
            f"A bar graph of test averages starts its y-axis at {start}. "
            f"The bar for this year ({after}) looks several times taller than last year's ({before}).\n\n"
            "What is the main problem with the graph?"
        )
        options = (
            "The y-axis is truncated, making a small change look dramatic",
            "The graph should always be a pie chart",
            "Averages can never be graphed",
            "The x-axis should be removed",
        )
        return Question(
            id=f"truncated_axis:{start}:{before}:{after}",
            prompt=choice_prompt(stem, options),
            answer=1,
            hint="Check whether the vertical axis starts at 0 and whether the scale exaggerates differences.",
            difficulty=difficulty,
            tags=("data-literacy", "misleading-graph", "axis"),
            choices=options,
        )

    first, second, cause = pick(rng, (
        ("ice cream sales", "drownings", "hot weather"),
        ("hoodie sales", "hot chocolate sales", "cold weather"),
        ("shoe size", "reading level", "age"),
    ))
    stem = f"A graph shows that when {first} go up, {second} also go up.\n\nWhat is the best conclusion?"
    options = (
        f"{first.capitalize()} cause {second}",
        f"{second.capitalize()} cause {first}",
        f"They may be correlated, but another factor (like {cause}) could explain both",
        "The graph proves there is no relationship",
    )
    return Question(
        id=f"correlation:{first}",
        prompt=choice_prompt(stem, options),
        answer=3,
        hint="Correlation doesn't prove causation; look for a plausible third variable.",
        difficulty=difficulty,
        tags=("data-literacy", "correlation", "causation"),
        choices=options,
    )


def _predict_question(rng: RNG, difficulty: int) -> Question:
    m, b = pick(rng, ((2, 1), (1, 3), (-1, 16), (-2, 22)))
    target = rand_int(rng, 2, 8)
    noise = 2 if difficulty >= 3 else 1
    xs = [x for x in range(1, 10) if x != target]
    ys = [m * x + b + rand_int(rng, -noise, noise) for x in xs]
    slope, intercept = np.polyfit(xs, ys, 1)
    slope = normalize_number(slope)
    intercept = normalize_number(intercept)
    points = ", ".join(f"({x}, {y})" for x, y in zip(xs, ys))
    return Question(
        id=f"predict:{m}:{b}:{target}:" + "-".join(str(y) for y in ys),
        prompt=(
            f"Scatter plot points: {points}\n"
            f"The line of best fit is y = {slope}x + {intercept}.\n\n"
            f"Predict y when x = {target}. (Round to 2 decimals)"
        ),
        answer=normalize_number(slope * target + intercept),
        hint="Substitute x into the line of best fit.",
        difficulty=difficulty,
        tags=("statistics", "scatter", "predict"),
        dataset=tuple(ys),
        tolerance=DECIMAL_TOLERANCE,
    )


def get_question(rng: RNG, difficulty: int) -> Question:
    kinds = QUESTION_KINDS_BY_DIFFICULTY.get(difficulty, QUESTION_KINDS)
    kind = pick(rng, kinds)
    if kind in INTEGER_KINDS:
        return _integer_question(rng, kind, difficulty)
    if kind in DATA_KINDS:
        return _data_question(rng, kind, difficulty)
    if kind in LITERACY_KINDS:
        return _literacy_question(rng, kind, difficulty)
    return _predict_question(rng, difficulty)
