"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - ICP Match Scoring                                            ║
║                                                                              ║
║  WEIGHTS (sum = 100 when every criterion is present):                        ║
║  - Target industries  30  industry contains / is contained by a target       ║
║  - Target job titles  25  title contains / is contained by a target          ║
║  - Company size       20  max number in "employees" within [min, max]        ║
║  - Geographies        15  one of 6 location fields contains a target         ║
║  - Keywords           10  partial credit: 10 x matched / total               ║
║                                                                              ║
║  Only criteria present in the ICP count in max_score.                        ║
║  TIERS: >=80 exact, >=50 good, >=30 similar, else loose                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import math
from typing import List

from models import (
    LOCATION_FIELDS,
    IcpDefinition,
    MatchedCriteria,
    MatchResult,
    MatchType,
    RecommendationReason,
)
from services.text_matching import contains_ci, mutual_contains_ci, parse_max_digits_run

WEIGHT_INDUSTRY = 30
WEIGHT_JOB_TITLE = 25
WEIGHT_COMPANY_SIZE = 20
WEIGHT_GEOGRAPHY = 15
WEIGHT_KEYWORDS = 10

EXACT_THRESHOLD = 80
GOOD_THRESHOLD = 50
SIMILAR_THRESHOLD = 30


def _plural(count: int, one: str, many: str) -> str:
    return one if count == 1 else many


def classify_match(percentage: float) -> MatchType:
    if percentage >= EXACT_THRESHOLD:
        return MatchType.EXACT
    if percentage >= GOOD_THRESHOLD:
        return MatchType.GOOD
    if percentage >= SIMILAR_THRESHOLD:
        return MatchType.SIMILAR
    return MatchType.LOOSE


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _matching_targets(value, targets: List[str]) -> List[str]:
    return [t for t in targets if mutual_contains_ci(value, t)]


def calculate_match_score(contact: dict, icp: IcpDefinition) -> MatchResult:
    """
    Score one contact against an ICP.

    Returns a MatchResult with the rounded percentage as `score`, the matched
    items per criterion and the reasons sorted by weight (strongest first).
    """
    if not isinstance(icp, IcpDefinition):
        icp = IcpDefinition.model_validate(icp or {})

    score = 0.0
    max_score = 0
    reasons = []
    matched = MatchedCriteria()

    # Industry (30)
    if icp.target_industries:
        max_score += WEIGHT_INDUSTRY
        industries = _matching_targets(contact.get("industry"), icp.target_industries)
        if industries:
            score += WEIGHT_INDUSTRY
            matched.industries = industries
            reasons.append(RecommendationReason(
                type="industry",
                weight=WEIGHT_INDUSTRY,
                matched=industries,
                message=(
                    f"Matches {len(industries)} target "
                    f"{_plural(len(industries), 'industry', 'industries')}: {', '.join(industries)}"
                )
            ))

    # Job title (25)
    if icp.target_job_titles:
        max_score += WEIGHT_JOB_TITLE
        titles = _matching_targets(contact.get("title"), icp.target_job_titles)
        if titles:
            score += WEIGHT_JOB_TITLE
            matched.job_titles = titles
            reasons.append(RecommendationReason(
                type="jobTitle",
                weight=WEIGHT_JOB_TITLE,
                matched=titles,
                message=(
                    f"Matches target job {_plural(len(titles), 'title', 'titles')}: "
                    f"{', '.join(titles)}"
                )
            ))

    # Company size (20) - the default 0-1000 range is not a criterion
    if icp.has_size_criterion():
        max_score += WEIGHT_COMPANY_SIZE
        size = parse_max_digits_run(contact.get("employees"))
        if size is not None and icp.company_size_min <= size <= icp.company_size_max:
            score += WEIGHT_COMPANY_SIZE
            matched.company_size = True
            reasons.append(RecommendationReason(
                type="companySize",
                weight=WEIGHT_COMPANY_SIZE,
                matched=[size],
                message=(
                    f"Company size ({size:,} employees) matches target range "
                    f"({icp.company_size_min:,}-{icp.company_size_max:,})"
                )
            ))

    # Geography (15)
    if icp.geographies:
        max_score += WEIGHT_GEOGRAPHY
        locations = [contact.get(f) for f in LOCATION_FIELDS]
        geos = [
            g for g in icp.geographies
            if any(contains_ci(loc, g) for loc in locations)
        ]
        if geos:
            score += WEIGHT_GEOGRAPHY
            matched.geographies = geos
            reasons.append(RecommendationReason(
                type="geography",
                weight=WEIGHT_GEOGRAPHY,
                matched=geos,
                message=(
                    f"Located in target {_plural(len(geos), 'geography', 'geographies')}: "
                    f"{', '.join(geos)}"
                )
            ))

    # Keywords (10, partial credit)
    if icp.keywords:
        max_score += WEIGHT_KEYWORDS
        keywords = [k for k in icp.keywords if contains_ci(contact.get("keywords"), k)]
        if keywords:
            score += min(WEIGHT_KEYWORDS, WEIGHT_KEYWORDS * len(keywords) / len(icp.keywords))
            matched.keywords = keywords
            reasons.append(RecommendationReason(
                type="keywords",
                weight=WEIGHT_KEYWORDS,
                matched=keywords,
                message=(
                    f"Matches {len(keywords)} of {len(icp.keywords)} target "
                    f"{_plural(len(keywords), 'keyword', 'keywords')}: {', '.join(keywords)}"
                )
            ))

    reasons.sort(key=lambda r: r.weight, reverse=True)

    percentage = (score / max_score) * 100 if max_score > 0 else 0.0
    return MatchResult(
        score=round_half_up(percentage),
        raw_score=score,
        max_score=max_score,
        percentage=percentage,
        match_type=classify_match(percentage),
        matched_criteria=matched,
        recommendation_reasons=reasons
    )
