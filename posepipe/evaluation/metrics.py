"""Evaluation Metrics"""
from typing import Dict, List, Sequence

from sklearn.metrics import accuracy_score, precision_recall_fscore_support


def calculate_metrics(y_true: Sequence[str], y_pred: Sequence[str]) -> Dict[str, float]:
    """Calculate evaluation metrics."""
    accuracy = accuracy_score(y_true, y_pred)
    precision, recall, f1, _ = precision_recall_fscore_support(
        y_true, y_pred, average='weighted', zero_division=0
    )
    return {
        'accuracy': float(accuracy),
        'precision': float(precision),
        'recall': float(recall),
        'f1': float(f1)
    }


def per_class_report(y_true: Sequence[str], y_pred: Sequence[str], labels: List[str]) -> Dict[str, Dict[str, float]]:
    """Precision / recall / F1 / support for each label."""
    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, average=None, zero_division=0
    )
    return {
        label: {
            'precision': float(precision[i]),
            'recall': float(recall[i]),
            'f1': float(f1[i]),
            'support': int(support[i]),
        }
        for i, label in enumerate(labels)
    }
