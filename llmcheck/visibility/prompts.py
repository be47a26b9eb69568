"""
Industry Prompt Sets

Realistic questions people type into ChatGPT, Gemini or Perplexity, grouped
by industry. Each set holds exactly PROMPTS_PER_SCAN prompts; unknown
industries fall back to the generic "other" set.
"""

from typing import Dict, List, Optional

PROMPTS_PER_SCAN = 5

DEFAULT_INDUSTRY = "other"

INDUSTRY_PROMPTS: Dict[str, List[str]] = {
    "ecommerce": [
        "Best online stores for buying electronics",
        "Where to buy affordable clothing online",
        "Most trusted ecommerce sites for home goods",
        "Top online shopping platforms with fast shipping",
        "Best deals on online marketplaces right now",
    ],
    "saas": [
        "What's the best project management tool?",
        "Top CRM software for startups",
        "Best collaboration tools for remote teams",
        "Most affordable SaaS tools for small businesses",
        "Best software for automating business workflows",
    ],
    "media": [
        "Best news websites for tech coverage",
        "Top online publications for business insights",
        "Most reliable media sites for breaking news",
        "Best blogs for digital marketing advice",
        "Top content platforms for industry analysis",
    ],
    "education": [
        "Best online learning platforms for professionals",
        "Top educational websites for skill development",
        "Most effective online course providers",
        "Best resources for learning programming online",
        "Top e-learning sites with certifications",
    ],
    "healthcare": [
        "Best health information websites",
        "Top telemedicine platforms for consultations",
        "Most trusted sites for medical information",
        "Best wellness platforms for health tracking",
        "Top healthcare providers with online booking",
    ],
    "other": [
        "Best websites for this type of service",
        "Top-rated companies in this industry",
        "Most trusted online platforms in this space",
        "Best resources for finding reliable providers",
        "Top recommended sites by AI assistants",
    ],
}


def get_prompts_for_industry(industry: Optional[str]) -> List[str]:
    """Return the 5 prompts for an industry (case-insensitive), else "other"."""
    key = (industry or "").strip().lower()
    prompts = INDUSTRY_PROMPTS.get(key, INDUSTRY_PROMPTS[DEFAULT_INDUSTRY])
    return list(prompts)


def list_industries() -> List[str]:
    """Known industry keys, catch-all last."""
    return [k for k in INDUSTRY_PROMPTS if k != DEFAULT_INDUSTRY] + [DEFAULT_INDUSTRY]
