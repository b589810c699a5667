"""All prompt templates for Gemini API calls."""

from datetime import date

from models.schemas.candidate import CandidateProfile
from models.schemas.document_validation import DeclaredProfileFields
from models.schemas.organization import OrganizationProfile
from models.schemas.posting import Posting
from models.schemas.quality import QualityAssessment

MAX_DOCUMENT_CHARS = 8000


def _join(values: list[str]) -> str:
    return ", ".join(values) if values else "none listed"


def _candidate_block(candidate: CandidateProfile) -> str:
    return f"""- Name: {candidate.full_name}
- Institution: {candidate.institution or 'not provided'}
- Degree: {candidate.degree or 'not provided'}
- Graduation year: {candidate.graduation_year or 'not provided'}
- Skills: {_join(candidate.skills)}
- Interests: {_join(candidate.interests)}
- Location: {candidate.location or 'not provided'}
- Availability: {_join(candidate.availability_modes)}
- Bio: {candidate.bio or 'not provided'}"""


def _posting_block(organization: OrganizationProfile, posting: Posting) -> str:
    return f"""- Company: {organization.company_name}
- Industry: {organization.industry or 'not provided'}
- Title: {posting.title}
- Location: {posting.location or 'not provided'}
- Employment type: {posting.employment_type}
- Required skills: {_join(posting.skills_required)}
- Requirements: {_join(posting.requirements)}
- Description: {posting.description or 'not provided'}"""


def build_match_score_prompt(
    candidate: CandidateProfile,
    organization: OrganizationProfile,
    posting: Posting,
    as_of: date,
) -> str:
    """Tier 1 match scoring. The reply must be a bare integer."""
    return f"""You are matching graduate candidates to job postings for a New Zealand graduate placement program.
Today's date is {as_of.isoformat()}.

CANDIDATE:
{_candidate_block(candidate)}

POSTING:
{_posting_block(organization, posting)}

Rate the overall compatibility from 0 to 100. Weigh the factors roughly as:
- Skills alignment (40%)
- Location compatibility, remote/hybrid counts as compatible (20%)
- Availability vs employment type (15%)
- Interests vs company industry (10%)
- Graduation timing (10%)
- Profile completeness (5%)

Respond with ONLY the integer score (for example: 72). No words, no explanation."""


def build_match_notes_prompt(
    candidate: CandidateProfile,
    organization: OrganizationProfile,
    posting: Posting,
    score: int,
) -> str:
    return f"""You are a placement advisor explaining why a candidate was suggested for a job posting.
The match scored {score}/100.

CANDIDATE:
{_candidate_block(candidate)}

POSTING:
{_posting_block(organization, posting)}

Write 2-3 sentences for the employer explaining the main reasons for this match and any gaps worth probing in an interview.
Plain text only, no markdown, no bullet points."""


def build_job_quality_prompt(posting: Posting) -> str:
    salary = "not provided"
    if posting.salary_min is not None and posting.salary_max is not None:
        salary = f"{posting.salary_min:.0f} - {posting.salary_max:.0f}"
    deadline = posting.application_deadline.isoformat() if posting.application_deadline else "not provided"

    return f"""You are reviewing a job posting for a graduate placement program before it is published.

POSTING:
- Title: {posting.title}
- Location: {posting.location or 'not provided'}
- Employment type: {posting.employment_type}
- Required skills: {_join(posting.skills_required)}
- Salary range: {salary}
- Application deadline: {deadline}

DESCRIPTION:
---
{posting.description}
---

Assess clarity, completeness, inclusive language (flag terms like "rockstar", "ninja", "young"), and how attractive it is to graduates.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "score": <number 0-10>,
  "notes": [<short observations about the posting>],
  "suggestions": [<specific improvements the employer should make>]
}}"""


def build_job_enhancement_prompt(posting: Posting, assessment: QualityAssessment) -> str:
    suggestions = "\n".join(f"- {s}" for s in assessment.suggestions) or "- none"

    return f"""You are an expert recruitment copywriter improving a job posting for a graduate placement program.

TITLE: {posting.title}
REQUIRED SKILLS: {_join(posting.skills_required)}

CURRENT DESCRIPTION:
---
{posting.description}
---

REVIEWER SUGGESTIONS:
{suggestions}

Rewrite the description so it is clear, welcoming and inclusive. Keep every factual detail, do not invent salary figures or benefits, and include a short "How to Apply" section.
Respond with ONLY the improved description text."""


def build_document_extraction_prompt(
    text: str,
    declared: DeclaredProfileFields,
    document_type: str = "cv",
) -> str:
    kind = "academic record / transcript" if document_type == "academic_records" else "CV / resume"

    return f"""You are verifying a candidate's {kind} for a New Zealand graduate placement program.

Extract the identity and education details exactly as they appear in the document. Use null for anything the document does not state.
The candidate's profile claims the following (for context only, do NOT copy these values):
- Name: {declared.name}
- Institution: {declared.institution}
- Degree: {declared.degree}
- Graduation year: {declared.graduation_year}

DOCUMENT TEXT:
---
{text[:MAX_DOCUMENT_CHARS]}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "name": <full name as written, or null>,
  "institution": <institution name as written, or null>,
  "degree": <degree or qualification as written, or null>,
  "graduation_year": <integer year of graduation or expected graduation, or null>,
  "notes": [<anything that looks inconsistent or suspicious>]
}}"""


def build_profile_validation_prompt(candidate: CandidateProfile) -> str:
    links = {
        "LinkedIn": candidate.linkedin_url,
        "GitHub": candidate.github_url,
        "Portfolio": candidate.portfolio_url,
        "Resume": candidate.resume_url,
    }
    links_text = "\n".join(f"- {k}: {v or 'not provided'}" for k, v in links.items())

    return f"""You are reviewing a candidate profile for a New Zealand graduate placement program.

PROFILE:
{_candidate_block(candidate)}

LINKS:
{links_text}

Judge completeness, quality and professionalism, and whether the graduation timing fits a graduate program.

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "score": <number 0-10>,
  "notes": "<one or two sentences summarising the profile>",
  "suggestions": [<specific improvements the candidate should make>]
}}"""
