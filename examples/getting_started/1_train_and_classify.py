"""
Train every backend on a few inline snippets and classify new code.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from code_language_classifier import (
    LanguageClassifier,
    SampleCorpus,
    count_tokens,
    train_classifiers,
)
from code_language_classifier.model_store import bundle_from_dict, bundle_to_dict

snippets = {
    "go": [
        'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("hi")\n}\n',
        "func add(a int, b int) int {\n\treturn a + b\n}\n",
        "type Point struct {\n\tX, Y int\n}\n\nfunc (p Point) Norm() int {\n\treturn p.X*p.X + p.Y*p.Y\n}\n",
    ],
    "python": [
        "import sys\n\n\ndef main():\n    print('hi')\n",
        "def add(a, b):\n    return a + b\n",
        "class Point:\n    def __init__(self, x, y):\n        self.x = x\n        self.y = y\n",
    ],
    "ruby": [
        "def greet(name)\n  puts \"hi #{name}\"\nend\n",
        "class Point\n  attr_reader :x, :y\nend\n",
        "[1, 2, 3].each do |n|\n  puts n\nend\n",
    ],
}

corpus = SampleCorpus(samples={
    language: [count_tokens(text) for text in texts]
    for language, texts in snippets.items()
})

# All backends share one vocabulary of at most 20 tokens
report = train_classifiers(corpus, max_tokens=20)

print("Training Results:")
print("=" * 50)
print(f"Vocabulary: {', '.join(report.vocabulary)}")
for name, result in report.results.items():
    status = f"trained in {result.training_time:.3f}s" if result.succeeded else f"failed ({result.error})"
    print(f"  {name}: {status}")

# Round-trip through the bundle format used by the CLI
classifier = LanguageClassifier(bundle_from_dict(bundle_to_dict(report)))

test_sources = [
    "func main() {\n\tgo serve()\n}\n",
    "def serve(self):\n    return None\n",
    "items.each do |item|\n  puts item\nend\n",
]

print("\nClassification Results:")
print("=" * 50)
for i, source in enumerate(test_sources, 1):
    result = classifier.predict(source)
    print(f"\n{i}. Source: {source.splitlines()[0]}")
    print(f"   Predicted Language: {result.language}")
    print(f"   Agreement: {result.agreement:.0%}")
    for backend, language in result.backend_predictions.items():
        print(f"     - {backend}: {language}")
