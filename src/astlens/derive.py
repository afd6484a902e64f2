"""
Derived metrics and quality scores.

Every value here is a linear function of the two or three counts in a
MetricSnapshot.  The names borrow from the software-metrics literature
(CBO, LCOM, Halstead, maintainability index) but the formulas are
heuristic proxies kept to reproduce the dashboard's numbers; they are not
the textbook definitions and carry no analytical weight.
"""

import math

from .models import AnalysisConfig, ExtendedMetrics, MetricSnapshot, QualityScore


def _round_half_up(value: float) -> int:
    # half-up: round() would turn 80.5 into 80
    return math.floor(value + 0.5)


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def compute_extended_metrics(snapshot: MetricSnapshot) -> ExtendedMetrics:
    functions = snapshot.function_count
    variables = snapshot.variable_count
    return ExtendedMetrics(
        loc=snapshot.max_line,
        cyclomatic=max(1, functions + snapshot.event_listener_count),
        cbo=functions,
        rfc=functions + variables,
        fan_out=variables,
        lcom=max(0, functions - 1),
        tcc=1 - functions / 50,
        dit=1,
        noc=0,
        wmc=functions * 2,
        halstead_volume=variables * 10,
        halstead_effort=variables * 30,
        maintainability_index=171 - functions - variables,
    )


def calculate_quality_score(
    snapshot: MetricSnapshot,
    config: AnalysisConfig | None = None,
) -> QualityScore:
    """
    Score the snapshot on a 0–100 scale.

    Function and variable scores fall linearly to 0 at the configured
    maximum; the event score peaks at ``event_target`` listeners and loses
    ``event_penalty`` points per listener of distance either way.
    """
    config = config or AnalysisConfig()

    func = _clamp(100 - snapshot.function_count / config.max_functions * 100)
    var = _clamp(100 - snapshot.variable_count / config.max_variables * 100)
    distance = abs(snapshot.event_listener_count - config.event_target)
    event = _clamp(100 - distance * config.event_penalty)

    mi = _round_half_up(func * 0.4 + var * 0.3 + event * 0.3)

    return QualityScore(
        func_score=_round_half_up(func),
        var_score=_round_half_up(var),
        event_score=_round_half_up(event),
        mi_score=mi,
        total=_round_half_up((func + var + event + mi) / 4),
    )
