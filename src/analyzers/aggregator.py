"""
Commit Statistics Aggregation Module.

Turns the commits of one repository into the statistics of one year window:
- total and monthly commit counts
- average commits per counted month
- unique human contributors
- top human contributors by commit count

Counting rules (merge commits, bot commits) come from a CountingPolicy so
that every report variant runs through the same code path.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from config import logger
from exceptions import ConfigurationError
from miners.models import CommitRecord
from analyzers.models import (
    BotPolicy,
    ContributorCount,
    CountingPolicy,
    MONTHS_IN_YEAR,
    TOP_CONTRIBUTORS_LIMIT,
    YearAggregate,
    YearWindow,
)
from analyzers.plugins.bot_classifier import BotClassifier


def round_half_up(value: Decimal, places: int = 2) -> float:
    return float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


class CommitAggregator:
    """
    Aggregates commit records into per-year statistics.

    Totals and monthly buckets describe all counted activity, while the
    contributor figures only ever include human authors. With
    BotPolicy.INCLUDE_IN_TOTALS the two views intentionally diverge.
    """

    def __init__(self, classifier: BotClassifier, policy: CountingPolicy):
        """
        Initialize the aggregator.

        Args:
            classifier (BotClassifier): Decides which authors are automated
            policy (CountingPolicy): Merge and bot counting rules
        """
        self.classifier = classifier
        self.policy = policy

    def aggregate(
        self, commits: Iterable[CommitRecord], window: YearWindow, repo_slug: str
    ) -> YearAggregate:
        """
        Compute the statistics of one year window.

        Commits are visited in chronological order, so ties in the contributor
        ranking go to whoever committed first regardless of input order.

        Args:
            commits (Iterable[CommitRecord]): Commits of the repository
            window (YearWindow): Year window and month divisor
            repo_slug (str): Repository slug, selects the bot deny-list

        Returns:
            YearAggregate: Statistics for the window

        Raises:
            ConfigurationError: If the window's months_counted is not positive
        """
        if window.months_counted <= 0:
            raise ConfigurationError(
                f"months_counted must be positive for {repo_slug} {window.year}, "
                f"got {window.months_counted}"
            )

        monthly = [0] * MONTHS_IN_YEAR
        tally: Dict[str, int] = {}
        total = 0
        skipped_merges = 0
        bot_commits = 0

        for commit in sorted(commits, key=lambda c: (c.authored_at, c.sha)):
            # Re-filter: the API's since/until and UTC years can disagree at the edges
            if commit.authored_at.year != window.year or not window.contains(
                commit.authored_at
            ):
                continue

            if commit.is_merge and not self.policy.count_merges:
                skipped_merges += 1
                continue

            is_bot = self.classifier.is_commit_bot(commit, repo_slug)
            if is_bot:
                bot_commits += 1
                if self.policy.bot_policy is BotPolicy.EXCLUDE:
                    continue

            monthly[commit.authored_at.month - 1] += 1
            total += 1

            if not is_bot:
                key = commit.author_key
                tally[key] = tally.get(key, 0) + 1

        average = round_half_up(Decimal(total) / Decimal(window.months_counted))

        # sorted() is stable, so equal counts keep first-seen order
        ranking = sorted(tally.items(), key=lambda item: item[1], reverse=True)
        top = tuple(
            ContributorCount(author=author, commits=count)
            for author, count in ranking[:TOP_CONTRIBUTORS_LIMIT]
        )

        logger.info(
            {
                "message": "Aggregated commits",
                "repository": repo_slug,
                "year": window.year,
                "total_commits": total,
                "skipped_merges": skipped_merges,
                "bot_commits": bot_commits,
                "unique_human_contributors": len(tally),
            }
        )

        return YearAggregate(
            year=window.year,
            total_commits=total,
            monthly_counts=tuple(monthly),
            average_per_month=average,
            unique_human_contributors=len(tally),
            top_contributors=top,
        )
