#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
八字基础常量：天干、地支、五行、生肖

所有表均为静态数据，查表函数对已知符号全覆盖；
未知符号返回 UNKNOWN 哨兵值，不抛异常。
"""

from enum import Enum
from typing import Dict, Optional, Union


def _raw_symbol(symbol) -> str:
    if isinstance(symbol, Enum):
        return symbol.value
    return symbol or ""


class Element(str, Enum):
    """五行"""
    WOOD = "Wood"
    FIRE = "Fire"
    EARTH = "Earth"
    METAL = "Metal"
    WATER = "Water"
    UNKNOWN = "Unknown"

    @property
    def label_zh(self) -> str:
        return ELEMENT_LABELS_ZH.get(self, "")


class Animal(str, Enum):
    """十二生肖"""
    RAT = "Rat"
    OX = "Ox"
    TIGER = "Tiger"
    RABBIT = "Rabbit"
    DRAGON = "Dragon"
    SNAKE = "Snake"
    HORSE = "Horse"
    GOAT = "Goat"
    MONKEY = "Monkey"
    ROOSTER = "Rooster"
    DOG = "Dog"
    PIG = "Pig"
    UNKNOWN = ""


class Stem(str, Enum):
    """十天干"""
    JIA = "甲"
    YI = "乙"
    BING = "丙"
    DING = "丁"
    WU = "戊"
    JI = "己"
    GENG = "庚"
    XIN = "辛"
    REN = "壬"
    GUI = "癸"
    UNKNOWN = ""

    @classmethod
    def parse(cls, symbol: Optional[str]) -> "Stem":
        """原始符号 -> Stem，无法识别返回 UNKNOWN"""
        try:
            return cls(_raw_symbol(symbol))
        except (ValueError, TypeError):
            return cls.UNKNOWN


class Branch(str, Enum):
    """十二地支"""
    ZI = "子"
    CHOU = "丑"
    YIN = "寅"
    MAO = "卯"
    CHEN = "辰"
    SI = "巳"
    WU = "午"
    WEI = "未"
    SHEN = "申"
    YOU = "酉"
    XU = "戌"
    HAI = "亥"
    UNKNOWN = ""

    @classmethod
    def parse(cls, symbol: Optional[str]) -> "Branch":
        """原始符号 -> Branch，无法识别返回 UNKNOWN"""
        try:
            return cls(_raw_symbol(symbol))
        except (ValueError, TypeError):
            return cls.UNKNOWN


# 天干五行
STEM_ELEMENTS: Dict[Stem, Element] = {
    Stem.JIA: Element.WOOD, Stem.YI: Element.WOOD,
    Stem.BING: Element.FIRE, Stem.DING: Element.FIRE,
    Stem.WU: Element.EARTH, Stem.JI: Element.EARTH,
    Stem.GENG: Element.METAL, Stem.XIN: Element.METAL,
    Stem.REN: Element.WATER, Stem.GUI: Element.WATER,
}

# 地支五行
BRANCH_ELEMENTS: Dict[Branch, Element] = {
    Branch.ZI: Element.WATER, Branch.HAI: Element.WATER,
    Branch.YIN: Element.WOOD, Branch.MAO: Element.WOOD,
    Branch.SI: Element.FIRE, Branch.WU: Element.FIRE,
    Branch.SHEN: Element.METAL, Branch.YOU: Element.METAL,
    Branch.CHEN: Element.EARTH, Branch.XU: Element.EARTH,
    Branch.CHOU: Element.EARTH, Branch.WEI: Element.EARTH,
}

# 地支生肖
BRANCH_ANIMALS: Dict[Branch, Animal] = {
    Branch.ZI: Animal.RAT, Branch.CHOU: Animal.OX,
    Branch.YIN: Animal.TIGER, Branch.MAO: Animal.RABBIT,
    Branch.CHEN: Animal.DRAGON, Branch.SI: Animal.SNAKE,
    Branch.WU: Animal.HORSE, Branch.WEI: Animal.GOAT,
    Branch.SHEN: Animal.MONKEY, Branch.YOU: Animal.ROOSTER,
    Branch.XU: Animal.DOG, Branch.HAI: Animal.PIG,
}

ELEMENT_LABELS_ZH: Dict[Element, str] = {
    Element.WOOD: "木",
    Element.FIRE: "火",
    Element.EARTH: "土",
    Element.METAL: "金",
    Element.WATER: "水",
}

# 大运最多保留条数（10年一运，8运覆盖一生）
MAX_DAYUN_CYCLES = 8

# 向历法库请求的原始大运条数（含第0条起运前区间）
RAW_DAYUN_COUNT = 10


def stem_element(stem: Union[Stem, str, None]) -> Element:
    """天干 -> 五行"""
    return STEM_ELEMENTS.get(Stem.parse(stem), Element.UNKNOWN)


def branch_element(branch: Union[Branch, str, None]) -> Element:
    """地支 -> 五行"""
    return BRANCH_ELEMENTS.get(Branch.parse(branch), Element.UNKNOWN)


def element_of(symbol: Union[Stem, Branch, str, None]) -> Element:
    """天干或地支 -> 五行（天干与地支字符集不相交）"""
    element = stem_element(symbol)
    if element is Element.UNKNOWN:
        element = branch_element(symbol)
    return element


def animal_of(branch: Union[Branch, str, None]) -> Animal:
    """地支 -> 生肖"""
    return BRANCH_ANIMALS.get(Branch.parse(branch), Animal.UNKNOWN)
