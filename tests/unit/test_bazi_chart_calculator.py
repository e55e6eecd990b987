#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
tests/unit/test_bazi_chart_calculator.py
排盘组装单元测试（假历法 + 真实 lunar_python）
"""

import pytest

from core.calculators.bazi_chart_calculator import (
    BaziChartCalculator,
    calculate_bazi,
    parse_birth_date,
    parse_birth_time,
    parse_gender,
)
from core.data.constants import Animal, Element
from fakes import FakeCalendar, make_fake_cycles
from server.models.bazi_chart import Gender
from server.utils.exception_handler import ChartComputationError, InvalidInputError


class TestParsers:

    def test_parse_birth_date(self):
        assert parse_birth_date("1990-05-15") == (1990, 5, 15)

    @pytest.mark.parametrize("value", ["not-a-date", "1990/05/15", "1990-05", "", None])
    def test_parse_birth_date_invalid(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_birth_date(value)
        assert exc_info.value.field == "solar_date"
        assert exc_info.value.code == 400

    def test_parse_birth_time(self):
        assert parse_birth_time("14:30") == (14, 30)

    @pytest.mark.parametrize("value", ["12:00:00", "noon", "1430", ""])
    def test_parse_birth_time_invalid(self, value):
        with pytest.raises(InvalidInputError):
            parse_birth_time(value)

    @pytest.mark.parametrize("value", [
        " 1990-05-15", "1990-05-15 ", "+1990-05-15", "1990--5-15", "1_990-05-15",
        "１９９０-05-15", "1990-٥-15",
    ])
    def test_parse_birth_date_rejects_loose_digits(self, value):
        """int() 能接受但不属于 YYYY-MM-DD 的写法"""
        with pytest.raises(InvalidInputError) as exc_info:
            parse_birth_date(value)
        assert exc_info.value.field == "solar_date"

    @pytest.mark.parametrize("value", [" 14:30", "14: 30", "+14:30", "1_4:30", "１４:30"])
    def test_parse_birth_time_rejects_loose_digits(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            parse_birth_time(value)
        assert exc_info.value.field == "solar_time"

    def test_parse_birth_date_shape_only(self):
        """形状正确但日历上不存在的日期在这里不报错"""
        assert parse_birth_date("2024-02-30") == (2024, 2, 30)

    @pytest.mark.parametrize("value,expected", [
        ("male", Gender.MALE), ("Female", Gender.FEMALE), (Gender.MALE, Gender.MALE)
    ])
    def test_parse_gender(self, value, expected):
        assert parse_gender(value) is expected

    def test_parse_gender_invalid(self):
        with pytest.raises(InvalidInputError):
            parse_gender("other")


class TestCalculatorWithFakeCalendar:

    def test_day_master_is_day_stem(self, fake_calendar):
        result = calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=fake_calendar)
        assert result.day_master_stem == "甲"
        assert result.day_master_stem == result.day_pillar.stem
        assert result.day_pillar.stem_element is Element.WOOD
        assert result.day_pillar.branch_animal is Animal.RAT

    def test_echoes_input(self, fake_calendar):
        result = calculate_bazi("1990-05-15", "14:30", "female", "Shanghai", calendar=fake_calendar)
        assert result.birth_date == "1990-05-15"
        assert result.birth_time == "14:30"
        assert result.birth_instant == "1990-05-15T14:30"
        assert result.birth_place == "Shanghai"
        assert result.gender is Gender.FEMALE

    def test_calendar_receives_parsed_values(self, fake_calendar):
        calculate_bazi("1990-05-15", "14:30", "Female", "Beijing", calendar=fake_calendar)
        assert fake_calendar.calls == [(1990, 5, 15, 14, 30, "female")]

    def test_four_pillars(self, fake_calendar):
        result = calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=fake_calendar)
        got = [p.stem + p.branch for p in (
            result.year_pillar, result.month_pillar, result.day_pillar, result.hour_pillar
        )]
        assert got == ["庚午", "辛巳", "甲子", "辛未"]
        assert result.year_pillar.branch_animal is Animal.HORSE

    def test_cycles_capped(self, fake_calendar):
        result = calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=fake_calendar)
        assert len(result.cycles) == 8
        assert result.cycles[0].stem + result.cycles[0].branch == "壬午"

    def test_invalid_date_does_not_reach_calendar(self, fake_calendar):
        with pytest.raises(InvalidInputError):
            calculate_bazi("not-a-date", "14:30", "male", "Beijing", calendar=fake_calendar)
        assert fake_calendar.calls == []

    def test_invalid_time(self, fake_calendar):
        with pytest.raises(InvalidInputError):
            calculate_bazi("1990-05-15", "12:00:00", "male", "Beijing", calendar=fake_calendar)

    def test_calendar_error_wrapped(self):
        calendar = FakeCalendar(error=RuntimeError("library exploded"))
        with pytest.raises(ChartComputationError) as exc_info:
            calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=calendar)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_broken_cycle_reported(self):
        tokens = ["", "壬午", RuntimeError(), "甲申"]
        calendar = FakeCalendar(cycles=make_fake_cycles(tokens))
        diagnostics = []
        result = calculate_bazi("1990-05-15", "14:30", "male", "Beijing",
                                calendar=calendar, diagnostics=diagnostics)
        assert [c.stem + c.branch for c in result.cycles] == ["壬午", "甲申"]
        assert [d.index for d in diagnostics] == [2]

    def test_no_cycles(self):
        calendar = FakeCalendar(cycles=[])
        result = calculate_bazi("1990-05-15", "14:30", "male", "Beijing", calendar=calendar)
        assert result.cycles == []

    def test_last_diagnostics_reset(self):
        calculator = BaziChartCalculator(calendar=FakeCalendar(cycles=make_fake_cycles(["", ""])))
        calculator.calculate("1990-05-15", "14:30", "male", "Beijing")
        assert len(calculator.last_diagnostics) == 1
        calculator.calendar = FakeCalendar()
        calculator.calculate("1990-05-15", "14:30", "male", "Beijing")
        assert calculator.last_diagnostics == []


class TestCalculatorWithLunarPython:
    """使用真实历法库"""

    def test_known_chart(self):
        # 2000-01-01 立春前：己卯年 丙子月 戊午日 戊午时
        result = calculate_bazi("2000-01-01", "12:00", "male", "Beijing")
        got = [p.stem + p.branch for p in (
            result.year_pillar, result.month_pillar, result.day_pillar, result.hour_pillar
        )]
        assert got == ["己卯", "丙子", "戊午", "戊午"]
        assert result.day_master_stem == "戊"
        assert result.day_pillar.stem_element is Element.EARTH

    def test_real_cycles(self):
        result = calculate_bazi("1990-05-15", "14:30", "female", "Beijing")
        assert 0 < len(result.cycles) <= 8
        assert all(c.stem and c.branch for c in result.cycles)
        ages = [c.start_age for c in result.cycles]
        assert ages == sorted(ages)

    def test_deterministic(self):
        first = calculate_bazi("1985-11-03", "06:15", "male", "Chengdu")
        second = calculate_bazi("1985-11-03", "06:15", "male", "Chengdu")
        assert first == second

    @pytest.mark.parametrize("date_str,time_str", [
        ("2024-02-30", "12:00"),
        ("1990-05-15", "25:00"),
        ("1990-13-01", "12:00"),
    ])
    def test_impossible_values_raise_computation_error(self, date_str, time_str):
        with pytest.raises(ChartComputationError):
            calculate_bazi(date_str, time_str, "male", "Beijing")
