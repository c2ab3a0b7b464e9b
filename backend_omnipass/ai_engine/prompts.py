"""Prompt builders for the generative-language collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backend_omnipass.analytics.models import AnalysisMetrics, AnalysisResult


def _usd(value: float) -> str:
    return f"${value:,.2f}"


def _health(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def build_insights_prompt(metrics: "AnalysisMetrics") -> str:
    chain_lines = "\n".join(
        f"- {name} TVL: {_usd(tvl)}" for name, tvl in sorted(metrics.chain_tvls.items())
    ) or "- No chain balances"
    protocols = ", ".join(metrics.protocol_names) or "none"
    return f"""
Analyze this DeFi user's cross-chain activity and provide insights for access control decisions.

User Data:
- Address: {metrics.address}
{chain_lines}
- Total Portfolio: {_usd(metrics.total_tvl)}
- Active Chains: {metrics.active_chain_count}
- Protocols: {protocols}
- Average Health Factor: {_health(metrics.average_health_factor)}
- Active Positions: {metrics.active_positions}
- Risk Score: {metrics.risk_score}/100
- Activity Score: {metrics.activity_score}/100
- Diversification Score: {metrics.diversification_score}/100
- Access Tier: {metrics.tier.value}

Please provide analysis in this exact JSON format:
{{
  "summary": "Brief overview of user's DeFi profile",
  "reasoning": ["Point 1", "Point 2", "Point 3"],
  "recommendations": ["Recommendation 1", "Recommendation 2"],
  "riskFactors": ["Risk 1", "Risk 2"]
}}

Focus on:
- Portfolio diversification across chains
- Risk management (health factors)
- Experience level based on protocol usage
- Capital efficiency and position management

Keep responses concise and actionable."""


def _risk_label(score: int) -> str:
    if score < 50:
        return "(Needs Improvement)"
    if score > 80:
        return "(Excellent)"
    return "(Good)"


def build_coaching_prompt(question: str, analysis: "AnalysisResult | None") -> str:
    prompt = f"""You are OmniPass AI Coach, an expert DeFi advisor specializing in cross-chain portfolio optimization and risk management.

CONTEXT:
- User Question: "{question}"
- Focus on testnet-friendly advice since this is educational
- Provide actionable, specific guidance
- Consider multi-chain opportunities (Ethereum, Polygon)"""

    if analysis is not None:
        active = [c for c in analysis.chains if c.valuation_usd > 0]
        chains = ", ".join(f"{c.name} ({_usd(c.valuation_usd)})" for c in active)
        prompt += f"""

USER PORTFOLIO ANALYSIS:
- Current Tier: {analysis.tier.value}
- Total Value Locked: {_usd(analysis.total_value_locked_usd)}
- Risk Score: {analysis.risk_score}/100 {_risk_label(analysis.risk_score)}
- Activity Score: {analysis.activity_score}/100
- Diversification Score: {analysis.diversification_score}/100
- Active Chains: {len(active)} - {chains}
- Risk Factors: {", ".join(analysis.ai_insights.risk_factors)}
- Current Strengths: {", ".join(analysis.ai_insights.reasoning[:2])}"""

    prompt += """

RESPONSE FORMAT (Must be valid JSON):
{
  "answer": "Provide 2-3 paragraph detailed response with specific protocols, strategies, and actionable advice",
  "actionItems": ["Step 1: Specific actionable step", "Step 2: Another specific action", "Step 3: Third concrete step"],
  "relatedQuestions": ["Related question 1", "Related question 2"]
}

GUIDELINES:
- Recommend testnet protocols for learning (Aave V3 Sepolia, Uniswap V3 on Polygon)
- Focus on established, audited protocols with good track records
- Include specific numbers/targets when possible (e.g., "maintain health factor above 2.0")
- Mention risk management practices and safety measures
- Keep advice beginner-friendly but comprehensive and actionable
- If user has low TVL, focus on educational testnet strategies first"""
    return prompt
