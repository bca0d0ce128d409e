"""
Question Corpus Generator for benchmarking the statistics pipeline

Generates skewed synthetic Q&A datasets, one ``<site>.jsonl`` file per site:
- Question lengths follow a Pareto distribution (a few very long questions)
- Tag popularity is skewed (a few tags appear on most questions)
- Sites differ in size and verbosity

Each line has the shape the pipeline reads: {"texts": [...], "tags": [...]}.
"""

import argparse
import json
import random
from pathlib import Path
from typing import Dict, List

import numpy as np

from .models import UsageStat
from .records import Record


class CorpusGenerator:
    """Generates Q&A corpora with controlled skew patterns."""

    def __init__(self, seed: int = 42, num_tags: int = 200):
        random.seed(seed)
        np.random.seed(seed)

        self.vocabulary = [
            "how", "do", "i", "the", "a", "to", "is", "in", "my", "for",
            "error", "when", "using", "file", "data", "function", "value",
            "not", "working", "with", "from", "can", "why", "does", "server",
            "question", "answer", "should", "paper", "phone", "episode",
        ]
        self.tags = [f"tag-{i}" for i in range(num_tags)]

        # Zipf-like tag popularity: tag i is picked with weight 1 / (i + 1)
        weights = 1.0 / np.arange(1, num_tags + 1)
        self.tag_probabilities = weights / weights.sum()

    def _generate_text(self, verbosity: float) -> str:
        num_words = int(np.random.pareto(2.0) * verbosity) + 1
        return " ".join(random.choices(self.vocabulary, k=num_words))

    def generate_question(self, verbosity: float) -> Dict[str, List[str]]:
        num_texts = random.randint(1, 3)
        num_tags = random.randint(1, 5)
        tags = np.random.choice(
            self.tags, size=num_tags, replace=False, p=self.tag_probabilities
        )
        return {
            "texts": [self._generate_text(verbosity) for _ in range(num_texts)],
            "tags": [str(tag) for tag in tags],
        }

    def generate_corpus(
        self, output_dir: str, num_sites: int = 8, questions_per_site: int = 1000
    ) -> Dict[str, UsageStat]:
        """Write one partition per site and return the totals written per site."""
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        totals = {}
        for site_idx in range(num_sites):
            site_name = f"site{site_idx}.stackexchange.com"
            verbosity = random.uniform(5, 50)
            # Site sizes are skewed too: the first sites get the most questions
            num_questions = max(1, int(questions_per_site * 2 / (site_idx + 2)))

            stat = UsageStat()
            with open(output_path / f"{site_name}.jsonl", "w", encoding="utf-8") as f:
                for _ in range(num_questions):
                    question = self.generate_question(verbosity)
                    f.write(json.dumps(question) + "\n")
                    words = Record(question["texts"], frozenset()).word_count()
                    stat = stat + UsageStat(1, words)
            totals[site_name] = stat

        print(f"Generated {num_sites} partitions in {output_path}")
        return totals


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic Q&A corpus")
    parser.add_argument("output_dir", help="Directory to write the .jsonl partitions to")
    parser.add_argument("--num-sites", type=int, default=8)
    parser.add_argument("--questions-per-site", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    generator = CorpusGenerator(seed=args.seed)
    generator.generate_corpus(args.output_dir, args.num_sites, args.questions_per_site)


if __name__ == "__main__":
    main()
