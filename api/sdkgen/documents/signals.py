from __future__ import annotations
import re
from typing import Dict, List, Pattern
from sdkgen.models.schemas import ProviderType

ENDPOINT_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\b(?:POST|GET|PUT|DELETE|PATCH)\s+/\S*", re.IGNORECASE),
    re.compile(r"\b(?:POST|GET|PUT|DELETE|PATCH)\b"),
    re.compile(r"/api/\S*", re.IGNORECASE),
    re.compile(r"/v\d+/\S*", re.IGNORECASE),
    re.compile(r"\bendpoints?[\s:]", re.IGNORECASE),
    re.compile(r"\broutes?[\s:]", re.IGNORECASE),
    re.compile(r"https?://\S+/api", re.IGNORECASE),
]

AUTH_PATTERNS: List[Pattern[str]] = [
    re.compile(r"authentication", re.IGNORECASE),
    re.compile(r"authorization", re.IGNORECASE),
    re.compile(r"\bauth\b", re.IGNORECASE),
    re.compile(r"api[\s-]?key", re.IGNORECASE),
    re.compile(r"\bbearer\b", re.IGNORECASE),
    re.compile(r"\btokens?\b", re.IGNORECASE),
    re.compile(r"oauth", re.IGNORECASE),
    re.compile(r"\bjwt\b", re.IGNORECASE),
    re.compile(r"basic[\s-]?auth", re.IGNORECASE),
    re.compile(r"credentials?", re.IGNORECASE),
]

EXAMPLE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\bexamples?\b", re.IGNORECASE),
    re.compile(r"\bsamples?\b", re.IGNORECASE),
    re.compile(r"\bdemo\b", re.IGNORECASE),
    re.compile(r"\bcurl\b", re.IGNORECASE),
    re.compile(r"\brequests?\b", re.IGNORECASE),
    re.compile(r"\bresponses?\b", re.IGNORECASE),
    re.compile(r"\bpayload\b", re.IGNORECASE),
    re.compile(r"\{[^{}]*\"[^{}\"]+\"\s*:[^{}]*\}"),
    re.compile(r"```[\s\S]*?```"),
]

SCHEMA_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\bschemas?\b", re.IGNORECASE),
    re.compile(r"\bmodels?\b", re.IGNORECASE),
    re.compile(r"\binterfaces?\b", re.IGNORECASE),
    re.compile(r"\btypes?\b", re.IGNORECASE),
    re.compile(r"\bparameters?\b", re.IGNORECASE),
    re.compile(r"\bfields?\b", re.IGNORECASE),
    re.compile(r"\bproperty\b|\bproperties\b", re.IGNORECASE),
    re.compile(r"\battributes?\b", re.IGNORECASE),
]

PROVIDER_PATTERNS: Dict[ProviderType, List[Pattern[str]]] = {
    ProviderType.PAYMENT: [re.compile(p) for p in (
        r"\bpayments?\b", r"\btransactions?\b", r"\bcheckout\b", r"\bbilling\b",
        r"\binvoices?\b", r"\brefunds?\b", r"\bcharges?\b", r"\bsubscriptions?\b",
        r"\bcredit[\s-]?cards?\b", r"\bcurrency\b", r"\busd\b", r"\beur\b",
    )],
    ProviderType.SHIPPING: [re.compile(p) for p in (
        r"\bshipping\b", r"\bshipments?\b", r"\bdelivery\b", r"\blogistics\b",
        r"\btracking\b", r"\blabels?\b", r"\baddress(?:es)?\b", r"\bpackages?\b",
        r"\bfreight\b", r"\bcarriers?\b",
    )],
    ProviderType.MESSAGING: [re.compile(p) for p in (
        r"\bemails?\b", r"\bsms\b", r"\bnotifications?\b", r"\bcampaigns?\b",
        r"\bmarketing\b", r"\bnewsletters?\b", r"\bsubscribers?\b", r"\btemplates?\b",
        r"\bmessages?\b", r"\bmessaging\b",
    )],
}

SECTION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^[A-Z][A-Z ]{5,}$"),
    re.compile(r"^\d+\.?\s+[A-Z][A-Za-z ]{5,}$"),
    re.compile(r"^#{1,3}\s+.+$"),
    re.compile(r"^[A-Z][a-z]+(?: [A-Z][a-z]+)*:$"),
]

MAX_SECTIONS = 15


def any_match(patterns: List[Pattern[str]], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def provider_scores(text: str) -> Dict[ProviderType, int]:
    """Keyword-family occurrence counts over the lower-cased text."""
    lowered = text.lower()
    return {
        provider: sum(len(pattern.findall(lowered)) for pattern in patterns)
        for provider, patterns in PROVIDER_PATTERNS.items()
    }


def detect_provider_type(text: str) -> ProviderType:
    """Family with the strictly highest count; ties and all-zero give UNKNOWN."""
    scores = provider_scores(text)
    best = max(scores.values())
    if best == 0:
        return ProviderType.UNKNOWN
    leaders = [provider for provider, score in scores.items() if score == best]
    return leaders[0] if len(leaders) == 1 else ProviderType.UNKNOWN


def extract_sections(text: str) -> List[str]:
    sections: List[str] = []
    seen = set()
    lines = [line.strip() for line in text.split("\n")]
    for pattern in SECTION_PATTERNS:
        for line in lines:
            if line and line not in seen and pattern.match(line):
                seen.add(line)
                sections.append(line)
    return sections[:MAX_SECTIONS]
