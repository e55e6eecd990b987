# -*- coding: utf-8 -*-
"""
Prompt 构建工具模块

命盘文本化、语言指令、对话系统指令、每日运势 prompt、开场问候。
只依赖模型定义，不依赖 FastAPI 或大模型 SDK。
"""

from datetime import date
from typing import Optional, Union

from server.models.bazi_chart import BaziResult, DaYun, Language


# ==============================================================================
# 通用辅助函数
# ==============================================================================

def _language(language: Union[Language, str]) -> Language:
    return Language(language)


def _current_cycle(chart: BaziResult, current_year: int) -> Optional[DaYun]:
    """当前年份所在的大运（按起运年份，每运十年）"""
    current = None
    for cycle in chart.cycles:
        if cycle.start_year <= current_year:
            current = cycle
    if current is not None and current_year >= current.start_year + 10:
        return None
    return current


def format_bazi_for_ai(chart: BaziResult, current_year: Optional[int] = None) -> str:
    """
    命盘 -> 给大模型的文本上下文

    Args:
        chart: 排盘结果
        current_year: 当前年份，用于标注当前大运（默认今年）
    """
    current_year = current_year or date.today().year
    y, m, d, h = chart.year_pillar, chart.month_pillar, chart.day_pillar, chart.hour_pillar

    lines = [
        f"Birth Place: {chart.birth_place}",
        f"Gender: {chart.gender.value}",
        f"Birth Date: {chart.birth_instant}",
        "",
        "Four Pillars (BaZi):",
        f"- Year: {y.stem}{y.branch} ({y.branch_animal.value}) - Element: {y.stem_element.value}",
        f"- Month: {m.stem}{m.branch} - Element: {m.stem_element.value}",
        f"- Day (Day Master): {d.stem}{d.branch} - Element: {d.stem_element.value}",
        f"- Hour: {h.stem}{h.branch} - Element: {h.stem_element.value}",
    ]

    if chart.cycles:
        lines.append("")
        lines.append("Major Cycles (Da Yun):")
        current = _current_cycle(chart, current_year)
        for cycle in chart.cycles:
            marker = " <- current" if cycle is current else ""
            lines.append(
                f"- Age {cycle.start_age}-{cycle.end_age} (from {cycle.start_year}): "
                f"{cycle.stem}{cycle.branch}{marker}"
            )

    lines.append("")
    lines.append(f"Current year: {current_year}.")
    return "\n".join(lines)


def language_directive(language: Union[Language, str]) -> str:
    """强制输出语言的指令"""
    if _language(language) is Language.ZH:
        return "IMPORTANT: You MUST answer in simplified Chinese (简体中文)."
    return "IMPORTANT: You MUST answer in English."


def build_chat_system_instruction(
    chart: BaziResult,
    language: Union[Language, str],
    current_year: Optional[int] = None
) -> str:
    """对话系统指令：命理师人设 + 解读准则 + 语言指令 + 命盘"""
    context = format_bazi_for_ai(chart, current_year)
    return f"""You are a wise, empathetic, and expert Master of Chinese Metaphysics (BaZi and Feng Shui).
You interpret the user's "Four Pillars of Destiny" provided in the context.

{language_directive(language)}

Guidelines:
1. Analyze the interaction between the Day Master (the Day Stem) and the other elements (Season, Strength).
2. Be encouraging but honest. Use metaphors related to nature (e.g., "Weak Fire needs Wood to burn").
3. Structure your answers clearly.
4. If asked about "Love" (Zheng Yuan), look for the Spouse Star (Wealth element for men, Officer element for women).
5. If asked about "Career", look for Officer/Resource/Wealth stars.
6. Consider the birth place if relevant for geographical or directional advice.
7. Keep the tone mystical yet grounded and helpful.
8. Do not be fatalistic; always offer advice on how to improve luck (e.g., "Wear more blue," "Travel north").

User's BaZi Data:
{context}
"""


def build_daily_fortune_prompt(
    chart: BaziResult,
    language: Union[Language, str],
    today: Union[date, str]
) -> str:
    """每日运势 prompt（结构化 JSON 输出）"""
    if isinstance(today, date):
        today = today.isoformat()
    if _language(language) is Language.ZH:
        lang_prompt = "Provide the content in simplified Chinese (简体中文)."
    else:
        lang_prompt = "Provide the content in English."

    return f"""Based on the BaZi profile below, generate a specialized "Daily Fortune" for today ({today}).
{lang_prompt}

Return the result strictly in JSON format.

Profile:
{format_bazi_for_ai(chart, int(today[:4]))}
"""


def build_chat_greeting(chart: BaziResult, language: Union[Language, str]) -> str:
    """对话开场白"""
    element = chart.day_pillar.stem_element
    if _language(language) is Language.ZH:
        return (
            f"您好。我已经分析了您出生在{chart.birth_place}的八字。"
            f"您的日主是{chart.day_master_stem}（{element.label_zh}）。"
            f"今天我可以为您指引什么？您可以询问关于事业、财运或姻缘。"
        )
    return (
        f"Greetings. I have analyzed your BaZi chart based on your birth in {chart.birth_place}. "
        f"Your Day Master is {chart.day_master_stem} ({element.value}). "
        f"How may I guide you today? You can ask about Career, Wealth, or Relationships."
    )


def chat_interrupted_message(language: Union[Language, str]) -> str:
    """对话流中断时给用户的提示"""
    if _language(language) is Language.ZH:
        return "连接中断，请重试。"
    return "The cosmic connection was interrupted. Please try asking again."
