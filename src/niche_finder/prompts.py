"""Response models and prompt builders for the niche-finding tasks.

Explanatory text is requested in `language`; names and titles keep an
"original" form in the target market's language plus a "translated" form.
"""

from pydantic import BaseModel, Field

# --- Response models ---


class Bilingual(BaseModel):
    original: str
    translated: str


class Metric(BaseModel):
    score: int = Field(description="Score from 1-100.")
    explanation: str = Field(description="Explanation in the output language.")


class Monetization(Metric):
    rpm_estimate: str = Field(description="Estimated RPM range, e.g., '$1 - $5'.")


class Analysis(BaseModel):
    interest_level: Metric = Field(description="Higher is better.")
    monetization_potential: Monetization = Field(description="Higher is better.")
    competition_level: Metric = Field(description="Lower is better.")
    sustainability: Metric = Field(description="Higher is better.")


class Niche(BaseModel):
    niche_name: Bilingual
    description: str
    audience_demographics: str
    analysis: Analysis
    content_strategy: str


class NicheAnalysis(BaseModel):
    niches: list[Niche]


class VideoIdea(BaseModel):
    title: Bilingual
    draft_content: str = Field(
        description="A short (1-2 sentences) draft/outline of the video content."
    )


class VideoIdeas(BaseModel):
    video_ideas: list[VideoIdea]


class ContentIdea(BaseModel):
    title: Bilingual
    hook: str = Field(
        description="An engaging opening hook (1-2 sentences) for the video."
    )
    main_points: list[str] = Field(
        description="A list of 3-5 key talking points or scenes for the video."
    )
    call_to_action: str = Field(
        description="A suggested call to action for the end of the video."
    )
    visual_suggestions: str = Field(
        description="Suggestions for b-roll, graphics, or on-screen text."
    )


class ContentPlan(BaseModel):
    content_ideas: list[ContentIdea]


# --- Filters ---

FILTER_LEVELS = ("all", "low", "medium", "high")

_SCORE_RANGES = {"low": "1-33", "medium": "34-66", "high": "67-100"}

_FILTER_FIELDS = (
    ("interest", "Interest Level", "interest_level", ""),
    ("monetization", "Monetization Potential", "monetization_potential", ""),
    ("sustainability", "Sustainability", "sustainability", ""),
    (
        "competition",
        "Competition Level",
        "competition_level",
        " Remember for competition, a lower score is better.",
    ),
)


def filter_rules(filters: dict | None) -> list[str]:
    """{"interest": "high", ...} -> one constraint line per active filter."""
    filters = filters or {}
    for name, level in filters.items():
        if level not in FILTER_LEVELS:
            raise ValueError(f"Invalid {name} filter level: {level!r}")
    rules = []
    for name, label, field, note in _FILTER_FIELDS:
        level = filters.get(name, "all")
        if level != "all":
            rules.append(
                f"- **{label}**: The '{field}.score' must be in the range "
                f"{_SCORE_RANGES[level]}.{note}"
            )
    return rules


def _avoid(kind: str, items) -> str:
    items = [i for i in items if i]
    if not items:
        return ""
    return (
        f"\n\nIMPORTANT: You have already suggested the following {kind}. "
        "DO NOT suggest them again or anything too similar. Be creative and "
        f"find new angles. {kind.capitalize()} to avoid: {', '.join(items)}."
    )


# --- Niche analysis ---

_NICHE_FIELDS = """- analysis: A detailed breakdown with scores from 1-100.
    - interest_level: Score how high the search volume/interest is. Higher is better. Provide a brief {language} explanation.
    - monetization_potential: Score the potential for making money. Higher is better. Provide an estimated RPM range (e.g., "$1 - $5") and a {language} explanation of monetization methods (AdSense, affiliates, etc.).
    - competition_level: Score the level of competition. A LOWER score is better (less competition is good). Provide a {language} explanation.
    - sustainability: Score the long-term potential and evergreen nature of the niche. Higher is better. Provide a {language} explanation."""


def analysis_system(
    count: int, avoid=(), filters: dict | None = None, language: str = "Vietnamese"
) -> str:
    text = f"""You are a YouTube Niche Analysis AI. Your goal is to provide a detailed, data-driven analysis of a user-provided niche idea.
IMPORTANT: All explanatory and descriptive text (description, demographics, explanations, strategy, etc.) MUST be in {language.upper()}.

Analyze the user's idea and generate exactly {count} distinct sub-niches or angles related to it.
For each niche, provide all the fields in the specified JSON structure. DO NOT generate 'video_ideas'.

- niche_name: An object with two fields: "original" (a catchy name in the target market's native language) and "translated" (the {language} translation).
- description: A short paragraph in {language} explaining what the niche is about.
- audience_demographics: Describe the target audience in {language} (age, gender, interests, etc.).
{_NICHE_FIELDS.format(language=language)}
- content_strategy: Suggest a content strategy in {language} (e.g., tutorials, reviews, vlogs) and posting frequency."""

    rules = filter_rules(filters)
    if rules:
        text += (
            "\n\nCRITICAL FILTERING REQUIREMENTS: You MUST adhere to the following "
            "constraints for every niche you generate:\n" + "\n".join(rules)
        )
    return text + _avoid("niches", avoid)


def analysis_prompt(idea: str, market: str) -> str:
    return f'Analyze the YouTube niche idea: "{idea}". Target market: {market}.'


def keyword_system(language: str = "Vietnamese") -> str:
    return f"""You are a YouTube Niche Analysis AI. Your goal is to provide a detailed, data-driven analysis of the single user-provided niche idea.
IMPORTANT: All explanatory and descriptive text (description, demographics, explanations, strategy, etc.) MUST be in {language.upper()}.

Analyze the user's idea as a single niche. DO NOT generate sub-niches.
Provide all the fields in the specified JSON structure. The final output must be a JSON object with a "niches" key containing an array with EXACTLY ONE element representing your analysis.

- niche_name: For "original", use the user's input. For "translated", provide the {language} translation.
- description: A detailed paragraph in {language} explaining what this specific niche is about.
- audience_demographics: Describe the target audience for this niche in {language}.
{_NICHE_FIELDS.format(language=language)}
- content_strategy: Suggest a content strategy in {language} for this specific niche."""


def keyword_prompt(idea: str, market: str) -> str:
    return (
        f'Analyze this specific YouTube niche idea in detail: "{idea}". '
        f"Target market: {market}."
    )


# --- Video ideas ---


def video_ideas_system(
    niche_name: str, avoid=(), language: str = "Vietnamese"
) -> str:
    text = f"""You are an expert YouTube Content Strategist. Your task is to generate 5 creative and engaging video ideas for the provided niche.
The niche is defined by its name, which is in the target market's language.
Base your video ideas solely on this original niche name.

IMPORTANT: For your output, follow these rules:
1.  The "draft_content" for each idea MUST be in {language.upper()}.
2.  The "title.original" MUST be a viral, catchy title in the same language as the provided niche name.
3.  The "title.translated" MUST be the {language} translation of the original title.

- Niche context to focus on:
  - Name: {niche_name}

Generate exactly 5 distinct and creative video ideas."""
    return text + _avoid("video ideas", avoid)


def video_ideas_prompt(niche: dict) -> str:
    name = niche["niche_name"]["original"]
    return f'Please generate 5 video ideas for the YouTube niche: "{name}".'


# --- Content plans ---

_PLAN_FIELDS = """  - title: An object with "original" (a viral, catchy title in the target market's native language) and "translated" (the {language} translation).
  - hook: A powerful, attention-grabbing opening for the video (1-2 sentences) in {language}.
  - main_points: An array of 3-5 bullet points outlining the core content, scenes, or talking points of the video. In {language}.
  - call_to_action: A clear and effective call to action for the end of the video (e.g., subscribe, comment, check out a link). In {language}.
  - visual_suggestions: Creative ideas for B-roll footage, on-screen graphics, animations, or filming styles to make the video more engaging. In {language}."""


def content_plan_system(
    niche_name: str,
    niche_description: str,
    count: int,
    avoid=(),
    language: str = "Vietnamese",
) -> str:
    text = f"""You are an expert YouTube Content Strategist and Scriptwriter. Your task is to generate {count} highly detailed and engaging video content plans for the given niche.
The user will provide you with a niche name and description.
IMPORTANT: All explanatory text (hook, main_points, call_to_action, visual_suggestions) MUST be in {language.upper()}.

For each of the {count} content plans, you MUST provide all the fields in the specified JSON structure.

- Niche context:
  - Name: {niche_name}
  - Description: {niche_description}

- Your output must follow this structure for each idea:
{_PLAN_FIELDS.format(language=language)}

Generate exactly {count} distinct and creative video plans."""
    return text + _avoid("video ideas", avoid)


def content_plan_prompt(niche: dict) -> str:
    name = niche["niche_name"]
    return (
        "Based on the following niche, create a detailed content plan.\n\n"
        f"Niche name: {name['original']} ({name['translated']})\n"
        f"Description: {niche['description']}\n"
        f"Audience: {niche['audience_demographics']}"
    )


def develop_ideas_system(
    niche_name: str, niche_description: str, language: str = "Vietnamese"
) -> str:
    return f"""You are an expert YouTube Content Strategist and Scriptwriter. Your task is to take a provided list of video ideas (each with a title and draft content) and develop them into detailed content plans.
IMPORTANT: All explanatory text (hook, main_points, call_to_action, visual_suggestions) MUST be in {language.upper()}. DO NOT generate new ideas, only expand the ones provided by the user.

- Niche context:
  - Name: {niche_name}
  - Description: {niche_description}

For EACH idea provided by the user, you MUST develop it into the specified JSON structure:
- title: Use the EXACT "original" and "translated" titles provided by the user for the idea.
- hook: Create a powerful, attention-grabbing opening for the video (1-2 sentences) in {language}.
- main_points: Use the user-provided "draft_content" as the primary source and expand it into an array of 3-5 bullet points outlining the core content. In {language}.
- call_to_action: A clear and effective call to action for the end of the video. In {language}.
- visual_suggestions: Creative ideas for B-roll footage, on-screen graphics, or filming styles. In {language}.

Your output must be an array of these developed ideas, matching the order of the input.
"""


def develop_ideas_prompt(niche: dict) -> str:
    ideas = "\n\n".join(
        f"- Title (Original): {idea['title']['original']}\n"
        f"  Title (Translated): {idea['title']['translated']}\n"
        f"  Draft Content: {idea['draft_content']}"
        for idea in niche.get("video_ideas") or []
    )
    return (
        "Based on the following niche and this list of draft ideas, develop them "
        "into detailed content plans. Only develop the ideas provided, do not "
        f"create new ones.\n\n**Niche:** {niche['niche_name']['original']}\n\n"
        f"**Ideas to develop:**\n{ideas}"
    )


# --- Channel plan ---

_CHANNEL_PLAN_REQUEST = """Read the content of this niche card carefully, including its video ideas (if any), and create a **detailed YouTube channel development plan** with the following sections:

1. **Channel summary** - Briefly describe the channel's topic, goals and standout value.
2. **Target audience** - Analyze the age, gender, region, interests and viewing behavior of the ideal audience.
3. **Content structure / series** - Suggest the main topic groups or content series, with representative examples.
4. **Posting schedule** - Propose a posting plan for the first week, 1 month, 3 months and 6 months, and rank the top 5 videos to make first.
5. **SEO and growth strategy** - Propose keywords, titles, thumbnail optimization, descriptions and engagement tactics.
6. **Brand, tone and visual style** - Describe the storytelling style, brand colors, fonts, visual mood and editing style.
7. **Monetization plan** - List viable revenue streams (AdSense, sponsorships, affiliates, Patreon, digital products, etc.).
8. **Long-term direction** - Suggest how to expand the channel brand after one year (e.g., podcast, collaborations, spin-offs, in-depth content).
9. **5 channel name sets** - Each set includes:
   - Channel name
   - Channel description
   - Main hashtags
   - Thumbnail prompt
   - Logo prompt
   -> Write these in **the language I used when searching for the niche**, with a {language} note underneath.

Present the result in **{language}**, split into clear sections (## headings), easy to read and actionable."""

_CHANNEL_PLAN_SYSTEM = "You are a world-class YouTube channel development strategist. Your task is to generate a comprehensive, actionable channel growth plan based on the user's instructions and the provided niche data. The final output must be in {language_upper} and formatted clearly with markdown headers (## Title). You must follow all user instructions precisely."

_DETAILED_CHANNEL_PLAN_SYSTEM = "You are a world-class YouTube channel development strategist. A user has requested a more detailed version of a channel plan. Your task is to regenerate the plan to be **more detailed, in-depth, and provide even more actionable steps** than a standard plan. Expand on each section, especially SEO, content strategy, and long-term development. The final output must be in {language_upper} and formatted clearly with markdown headers (## Title). You must follow all user instructions precisely."


def channel_plan_system(detailed: bool = False, language: str = "Vietnamese") -> str:
    template = _DETAILED_CHANNEL_PLAN_SYSTEM if detailed else _CHANNEL_PLAN_SYSTEM
    return template.format(language_upper=language.upper())


def format_niche_card(niche: dict) -> str:
    """Render a niche result as the text block the channel plan prompt reads."""
    name = niche["niche_name"]
    a = niche["analysis"]
    lines = [
        "",
        "--- NICHE CARD DATA ---",
        "",
        f"**Niche name (original):** {name['original']}",
        f"**Niche name (translated):** {name['translated']}",
        f"**Description:** {niche['description']}",
        f"**Target audience:** {niche['audience_demographics']}",
        f"**Suggested content strategy:** {niche['content_strategy']}",
        "",
        "**Detailed analysis:**",
        f"- Interest: {a['interest_level']['score']}/100 "
        f"({a['interest_level']['explanation']})",
        f"- Monetization: {a['monetization_potential']['score']}/100 "
        f"(RPM: {a['monetization_potential']['rpm_estimate']}) "
        f"({a['monetization_potential']['explanation']})",
        f"- Competition: {a['competition_level']['score']}/100 "
        f"({a['competition_level']['explanation']})",
        f"- Sustainability: {a['sustainability']['score']}/100 "
        f"({a['sustainability']['explanation']})",
    ]
    ideas = niche.get("video_ideas") or []
    if ideas:
        lines += ["", "**Initial video ideas:**"]
        lines += [
            f"- {i['title']['original']} ({i['title']['translated']}): "
            f"{i['draft_content']}"
            for i in ideas
        ]
    lines += ["", "--- END OF CARD DATA ---"]
    return "\n".join(lines)


def channel_plan_prompt(niche: dict, language: str = "Vietnamese") -> str:
    request = _CHANNEL_PLAN_REQUEST.format(language=language)
    return f"{request}\n\n{format_niche_card(niche)}"


# --- Training chat ---

TRAINING_SYSTEM = "You are a helpful AI assistant for a YouTube Niche Finder tool. The user is providing you with training data or asking questions about your capabilities. Respond conversationally and helpfully. Acknowledge that you have learned the information provided."


def attachment_note(names, inline: bool) -> str:
    """Text appended to a training message that carries files."""
    if inline:
        listing = "\n".join(f"- {name}" for name in names)
        return f"\n\n--- Uploaded files ---\n{listing}"
    return "\n\n[OpenAI models cannot process attached files directly.]"
