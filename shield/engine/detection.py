"""Detection + tracking and classification, both compressed to single draws.

An undetected object never reaches classification.  A detected object is
labelled "warhead track" with the true-positive rate if it really is a
warhead, or with the false-alarm rate if it is a decoy.  Only warhead
tracks are ever engaged.
"""

from __future__ import annotations

from dataclasses import dataclass

from shield.core.random_draws import RandomSource, bernoulli
from shield.engine.salvo import Target


@dataclass(frozen=True)
class TrackAssessment:
    """What the defense perceived about one object.

    Attributes:
        detected: Whether the object was detected and tracked.
        classified_as_warhead: Whether the track was labelled a threat
            (always ``False`` when undetected).
    """

    detected: bool
    classified_as_warhead: bool

    @property
    def engageable(self) -> bool:
        return self.detected and self.classified_as_warhead


def classify_target(
    target: Target,
    p_classify_warhead: float,
    p_false_alarm_decoy: float,
    rng: RandomSource,
) -> bool:
    """Return whether a detected *target* is classified as a warhead track."""
    if target.is_warhead:
        return bernoulli(rng, p_classify_warhead)
    return bernoulli(rng, p_false_alarm_decoy)


def assess_target(
    target: Target,
    p_detect_track: float,
    p_classify_warhead: float,
    p_false_alarm_decoy: float,
    rng: RandomSource,
) -> TrackAssessment:
    """Run detection, then classification if detected.

    Args:
        target: Object under observation.
        p_detect_track: Operative detection probability for this trial.
        p_classify_warhead: Classifier true-positive rate.
        p_false_alarm_decoy: Classifier false-positive rate.
        rng: Entropy source (one draw, or two if detected).

    Returns:
        The resulting :class:`TrackAssessment`.
    """
    if not bernoulli(rng, p_detect_track):
        return TrackAssessment(detected=False, classified_as_warhead=False)

    classified = classify_target(target, p_classify_warhead, p_false_alarm_decoy, rng)
    return TrackAssessment(detected=True, classified_as_warhead=classified)
