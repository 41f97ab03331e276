#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Row selection helpers for the store dataframes."""

from typing import Any, Callable, Sequence

import polars as pl
from rapidfuzz import fuzz, process, utils

Predicate = Callable[[str, Any], pl.Expr]


def equals(column_name: str, value: Any) -> pl.Expr:
    """Rows whose `column_name` equals `value`; `None` selects nulls."""
    if value is None:
        return pl.col(column_name).is_null()
    return pl.col(column_name) == value


def before(column_name: str, value: Any) -> pl.Expr:
    return pl.col(column_name) < value


def after(column_name: str, value: Any) -> pl.Expr:
    return pl.col(column_name) > value


def select_rows(
    dataframe: pl.DataFrame, criteria: Sequence[tuple[str, Any, Predicate]]
) -> pl.DataFrame:
    """Keep the rows satisfying every `(column_name, value, predicate)` criterion.

    Raises
    ------
    ValueError if no criteria are given.
    """
    if not criteria:
        raise ValueError("At least one selection criterion is required")
    return dataframe.filter(
        *[predicate(column_name, value) for column_name, value, predicate in criteria]
    )


def fuzzy_matches(
    dataframe: pl.DataFrame, column_name: str, query: str, threshold: int = 90
) -> list[tuple[int, float]]:
    """`(row index, score)` of the rows whose `column_name` scores at least
    `threshold` against `query` with `fuzz.WRatio`, best match first."""
    # each match is a (choice, score, index) tuple
    matches = process.extract(
        query=query,
        choices=dataframe.get_column(column_name).to_list(),
        processor=utils.default_process,
        scorer=fuzz.WRatio,
        score_cutoff=threshold,
        limit=None,
    )
    return [(index, score) for _, score, index in matches]
