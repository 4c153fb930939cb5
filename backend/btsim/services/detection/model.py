"""
BTSim Credential Model

Trainable credential-entry classifier. Replaces only the scoring step of the
detection engine; factors still come from the rules.

The model keeps numeric feature vectors only. Field values typed by the user
are never part of a DetectionInput and never reach this module.
"""

import logging
import threading
from typing import List, Optional, Sequence

import numpy as np
from sklearn.linear_model import SGDClassifier

from btsim.models.detection import DetectionInput
from btsim.utils.constants import MODEL_FEATURE_COUNT, MODEL_RETRAIN_THRESHOLD
from btsim.utils.exceptions import ModelUnavailableError
from btsim.utils.helpers import matches_any

logger = logging.getLogger(__name__)


SUSPICIOUS_URL_MARKERS = [
    r"phish", r"fake", r"login.*verify", r"security.*check",
    r"bit\.ly|tinyurl|t\.co", r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}",
]

SUSPICIOUS_CONTENT_MARKERS = [
    "verify", "confirm", "update", "suspend", "limited",
    "unusual activity", "unauthorized", "breach", "expired",
    "account will be", "immediate action", "click here",
]


def extract_features(data: DetectionInput) -> np.ndarray:
    """
    Map a DetectionInput to the fixed 12-feature vector.

    Counts are left raw; behavior counters are normalized to [0, 1].
    """
    fields = data.form_fields
    behavior = data.user_behavior
    url = data.url or ""
    content = f"{data.page_title} {data.page_content}".lower()

    features = [
        sum(1 for f in fields if f.is_password),
        sum(1 for f in fields if f.is_hidden),
        sum(1 for f in fields if f.type == "email"),
        sum(1 for f in fields if f.type == "text"),
        1.0 if url.lower().startswith("https://") else 0.0,
        1.0 if matches_any(SUSPICIOUS_URL_MARKERS, url) else 0.0,
        1.0 if len(url) > 100 else 0.0,
        min(behavior.time_on_page / 60000, 1.0),
        min(behavior.mouse_movements / 100, 1.0),
        min(behavior.keystrokes / 50, 1.0),
        min(behavior.form_interactions / 10, 1.0),
        1.0 if any(k in content for k in SUSPICIOUS_CONTENT_MARKERS) else 0.0,
    ]
    return np.asarray(features, dtype=float)


class CredentialModel:
    """
    Logistic classifier trained incrementally from labelled outcomes.

    The model is unavailable until the first retrain; callers must fall back
    to the heuristic score until then.
    """

    def __init__(self, retrain_threshold: int = MODEL_RETRAIN_THRESHOLD, random_state: int = 42):
        self.retrain_threshold = retrain_threshold
        self._classifier = SGDClassifier(loss="log_loss", random_state=random_state)
        self._fitted = False
        self._pending_x: List[np.ndarray] = []
        self._pending_y: List[int] = []
        self._lock = threading.Lock()
        self.training_rounds = 0

    @property
    def is_ready(self) -> bool:
        return self._fitted

    @property
    def pending_examples(self) -> int:
        return len(self._pending_y)

    def predict_proba(self, data: DetectionInput) -> float:
        """
        Probability that the input is a credential-entry risk.

        Raises:
            ModelUnavailableError: if the model has not been trained
        """
        if not self._fitted:
            raise ModelUnavailableError("Credential model has not been trained")

        features = extract_features(data).reshape(1, MODEL_FEATURE_COUNT)
        with self._lock:
            probabilities = self._classifier.predict_proba(features)
        return float(probabilities[0][1])

    def add_training_example(self, data: DetectionInput, is_credential_entry: bool) -> bool:
        """
        Buffer a labelled example; retrain when the buffer is full.

        Returns:
            True if a retrain happened
        """
        self._pending_x.append(extract_features(data))
        self._pending_y.append(1 if is_credential_entry else 0)

        if len(self._pending_y) >= self.retrain_threshold:
            self.retrain()
            return True
        return False

    def fit(self, inputs: Sequence[DetectionInput], labels: Sequence[bool]) -> None:
        """Train directly on a batch, bypassing the buffer."""
        if len(inputs) != len(labels):
            raise ValueError("inputs and labels must have the same length")
        if not inputs:
            return
        x = np.vstack([extract_features(i) for i in inputs])
        y = np.asarray([1 if label else 0 for label in labels])
        self._partial_fit(x, y)

    def retrain(self) -> None:
        """Fold buffered examples into the model."""
        if not self._pending_y:
            return

        logger.info(f"Retraining credential model with {len(self._pending_y)} examples")
        x = np.vstack(self._pending_x)
        y = np.asarray(self._pending_y)
        self._pending_x = []
        self._pending_y = []
        self._partial_fit(x, y)

    def _partial_fit(self, x: np.ndarray, y: np.ndarray) -> None:
        with self._lock:
            self._classifier.partial_fit(x, y, classes=np.array([0, 1]))
            self._fitted = True
            self.training_rounds += 1
        logger.info(f"Credential model trained (round {self.training_rounds})")


# Singleton instance
_credential_model: Optional[CredentialModel] = None


def get_credential_model() -> CredentialModel:
    """Get the credential model singleton."""
    global _credential_model
    if _credential_model is None:
        _credential_model = CredentialModel()
    return _credential_model
