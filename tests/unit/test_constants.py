#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tests/unit/test_constants.py
天干/地支 五行、生肖查表单元测试
"""

import pytest

from core.data.constants import (
    Animal,
    Branch,
    Element,
    Stem,
    animal_of,
    branch_element,
    element_of,
    stem_element,
)

STEMS = "甲乙丙丁戊己庚辛壬癸"
BRANCHES = "子丑寅卯辰巳午未申酉戌亥"


class TestStemElements:

    @pytest.mark.parametrize("stem,expected", [
        ("甲", Element.WOOD), ("乙", Element.WOOD),
        ("丙", Element.FIRE), ("丁", Element.FIRE),
        ("戊", Element.EARTH), ("己", Element.EARTH),
        ("庚", Element.METAL), ("辛", Element.METAL),
        ("壬", Element.WATER), ("癸", Element.WATER),
    ])
    def test_known_stems(self, stem, expected):
        assert stem_element(stem) is expected
        assert element_of(stem) is expected

    def test_all_stems_classified(self):
        for stem in STEMS:
            assert stem_element(stem) is not Element.UNKNOWN


class TestBranchTables:

    @pytest.mark.parametrize("branch,element,animal", [
        ("子", Element.WATER, Animal.RAT),
        ("丑", Element.EARTH, Animal.OX),
        ("寅", Element.WOOD, Animal.TIGER),
        ("卯", Element.WOOD, Animal.RABBIT),
        ("辰", Element.EARTH, Animal.DRAGON),
        ("巳", Element.FIRE, Animal.SNAKE),
        ("午", Element.FIRE, Animal.HORSE),
        ("未", Element.EARTH, Animal.GOAT),
        ("申", Element.METAL, Animal.MONKEY),
        ("酉", Element.METAL, Animal.ROOSTER),
        ("戌", Element.EARTH, Animal.DOG),
        ("亥", Element.WATER, Animal.PIG),
    ])
    def test_known_branches(self, branch, element, animal):
        assert branch_element(branch) is element
        assert element_of(branch) is element
        assert animal_of(branch) is animal

    def test_all_branches_classified(self):
        for branch in BRANCHES:
            assert branch_element(branch) is not Element.UNKNOWN
            assert animal_of(branch) is not Animal.UNKNOWN


class TestUnknownSymbols:

    @pytest.mark.parametrize("symbol", ["", "X", "Jia", "甲子", "木", None, 5])
    def test_unknown_never_raises(self, symbol):
        assert element_of(symbol) is Element.UNKNOWN
        assert animal_of(symbol) is Animal.UNKNOWN

    def test_stem_is_not_a_branch(self):
        """天干不参与地支查表"""
        assert branch_element("甲") is Element.UNKNOWN
        assert animal_of("甲") is Animal.UNKNOWN
        assert stem_element("子") is Element.UNKNOWN

    def test_unknown_sentinels(self):
        assert Element.UNKNOWN.value == "Unknown"
        assert Animal.UNKNOWN.value == ""


class TestEnumParse:

    def test_parse_known(self):
        assert Stem.parse("甲") is Stem.JIA
        assert Branch.parse("子") is Branch.ZI

    def test_parse_enum_member(self):
        assert Stem.parse(Stem.GUI) is Stem.GUI
        assert stem_element(Stem.GUI) is Element.WATER
        assert animal_of(Branch.HAI) is Animal.PIG

    def test_parse_unknown(self):
        assert Stem.parse("子") is Stem.UNKNOWN
        assert Branch.parse(None) is Branch.UNKNOWN

    def test_alphabet_sizes(self):
        assert len([s for s in Stem if s is not Stem.UNKNOWN]) == 10
        assert len([b for b in Branch if b is not Branch.UNKNOWN]) == 12

    def test_element_zh_label(self):
        assert Element.WOOD.label_zh == "木"
        assert Element.UNKNOWN.label_zh == ""
