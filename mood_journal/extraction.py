"""Collapse multimodal emotion reports onto the four journal emotion axes."""

from __future__ import annotations

from typing import Dict, List

import numpy as np

from .schemas import EMOTION_AXES, AxisScores, MultimodalEmotionReport

NO_SIGNAL_SCORE = 0.5

# Many-to-one: external emotion vocabulary -> journal axis.
EMOTION_VOCABULARY: Dict[str, str] = {
    "joy": "happiness",
    "happiness": "happiness",
    "amusement": "happiness",
    "excitement": "happiness",
    "contentment": "happiness",
    "fear": "fear",
    "anxiety": "fear",
    "worry": "fear",
    "nervousness": "fear",
    "sadness": "sadness",
    "disappointment": "sadness",
    "grief": "sadness",
    "despair": "sadness",
    "anger": "anger",
    "frustration": "anger",
    "irritation": "anger",
    "rage": "anger",
}


def extract(report: MultimodalEmotionReport) -> AxisScores:
    """Average matched face and prosody scores per axis.

    Channels are pooled with equal weight. Names outside the vocabulary are
    dropped; an axis with no matches gets the 0.5 midpoint. Scores are
    assumed to be in [0, 1] already and are not reclamped.
    """
    pooled: Dict[str, List[float]] = {axis: [] for axis in EMOTION_AXES}
    for emotion in report.all_scores():
        axis = EMOTION_VOCABULARY.get(emotion.name.strip().lower())
        if axis is not None:
            pooled[axis].append(emotion.score)

    means = {
        axis: float(np.mean(scores)) if scores else NO_SIGNAL_SCORE
        for axis, scores in pooled.items()
    }
    return AxisScores(**means)
