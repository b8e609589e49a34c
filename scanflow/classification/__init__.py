from scanflow.classification.base import BaseClassifier
from scanflow.classification.classifier import LLMClassifier
from scanflow.classification.factory import ClassifierFactory

__all__ = ["BaseClassifier", "ClassifierFactory", "LLMClassifier"]
