"""
Compare backends over several vocabulary sizes on a directory of samples.

Usage: python 2_compare_backends.py <sample dir> [size ...]
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from code_language_classifier import (
    ClassifierTrainer,
    evaluate_classifier,
    load_samples,
    split_corpus,
)

if len(sys.argv) < 2:
    print(__doc__)
    sys.exit(1)

sizes = [int(size) for size in sys.argv[2:]] or [10, 50, 100]

corpus = load_samples(sys.argv[1])
training, holdout = split_corpus(corpus, holdout_fraction=0.2)
print(f"Loaded {corpus.num_samples} samples of {len(corpus.languages)} languages")
print(f"Holding out {holdout.num_samples} samples for scoring")

trainer = ClassifierTrainer()

print("\nHoldout accuracy:")
print("=" * 50)
print("size".ljust(8) + "".join(backend.identifier.ljust(12) for backend in trainer.backends))
for report in trainer.sweep(training, sizes):
    row = str(report.max_tokens).ljust(8)
    for backend in trainer.backends:
        result = report.results[backend.identifier]
        if result.succeeded:
            row += f"{evaluate_classifier(result.classifier, holdout).accuracy:.3f}".ljust(12)
        else:
            row += "failed".ljust(12)
    print(row)
