"""
Remote match analysis through Google's Gemini API.
"""
from __future__ import annotations

import logging
from typing import Optional

from google import genai
from google.genai import types

import config
from narrative.base import Analysis, NarrativeGenerator, PlayerContext
from narrative.context import (identify_patterns, news_history_text,
                               trade_analysis_text)
from narrative.heuristic import HeuristicNarrator

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """You are an expert financial coach analyzing a trading game performance. Provide detailed, personalized feedback based on the player's actual trades and market conditions.

GAME CONTEXT:
- Starting Cash: ${starting_cash:,.2f}
- Final Value: ${final_value:,.2f}
- ROI: {roi:.1f}%
- Risk Score: {risk_score}/100
- Total Rounds: {total_rounds}
- Strategy: {strategy}

NEWS EVENTS BY ROUND:
{news_history}

PLAYER'S TRADES:
{trade_analysis}

TRADING PATTERNS:
{patterns}

TASK:
Analyze this player's performance and provide:
1. What they did well (2-4 specific points based on their actual trades)
2. Mistakes and missed opportunities (2-4 specific points with examples)
3. Improvement suggestions (2-3 actionable tips)
4. 2-3 educational cards about concepts they should learn

Be specific! Reference actual trades, news events, and timing. Don't give generic advice.

Return ONLY valid JSON with this structure:
{{
  "playerSummary": {{
    "whatYouDidWell": ["specific positive action 1", "specific positive action 2"],
    "mistakesAndOpportunities": ["specific mistake 1 with example", "missed opportunity 1"],
    "improvementSuggestions": ["actionable tip 1", "actionable tip 2"]
  }},
  "learningCards": [
    {{
      "title": "Concept Title",
      "text": "Brief explanation (2-3 sentences)",
      "deepDive": "Detailed explanation with examples",
      "searchQuery": "search term for more info"
    }}
  ]
}}"""


def build_prompt(ctx: PlayerContext) -> str:
    strategy = ("None selected" if ctx.strategy.value == "UNSELECTED" else
                ctx.strategy.value)
    return ANALYSIS_PROMPT.format(
        starting_cash=ctx.starting_cash,
        final_value=ctx.final_value,
        roi=ctx.roi,
        risk_score=ctx.risk_score,
        total_rounds=ctx.total_rounds,
        strategy=strategy,
        news_history=news_history_text(ctx) or "No news",
        trade_analysis=trade_analysis_text(ctx),
        patterns="\n".join(f"- {p}" for p in identify_patterns(list(ctx.trades))),
    )


def parse_response(text: str) -> Analysis:
    """Strip Markdown fences and validate; raises on malformed output."""
    cleaned = text.replace("```json", "").replace("```", "").strip()
    return Analysis.model_validate_json(cleaned)


class GeminiNarrator(NarrativeGenerator):
    """Google Gemini backed analysis."""

    def __init__(
        self,
        api_key: str,
        model: str = config.GEMINI_MODEL,
        temperature: float = 0.4,
        max_tokens: int = 2000,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def analyze(self, context: PlayerContext) -> Analysis:
        response = await self._get_client().aio.models.generate_content(
            model=self.model,
            contents=build_prompt(context),
            config=types.GenerateContentConfig(
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
                response_mime_type="application/json",
            ),
        )
        if not response or not response.text:
            raise ValueError("empty response from Gemini")
        return parse_response(response.text)

    @property
    def name(self) -> str:
        return "gemini"


def build_narrator(api_key: Optional[str] = config.GEMINI_API_KEY
                   ) -> NarrativeGenerator:
    """Remote generator when a key is configured, else the local heuristic."""
    if api_key:
        logger.info("narrative analysis via Gemini (%s)", config.GEMINI_MODEL)
        return GeminiNarrator(api_key)
    logger.info("GEMINI_API_KEY not set, using heuristic analysis")
    return HeuristicNarrator()
