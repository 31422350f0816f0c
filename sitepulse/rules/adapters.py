"""Adapters mapping the generic Rules model onto component RulesPorts."""

from sitepulse.rules.models import Rules


class InstrumentationRulesAdapter:
    def __init__(self, rules: Rules):
        self._rules = rules.instrumentation

    def get_scroll_threshold_percent(self) -> float:
        return self._rules.scroll_threshold_percent

    def get_section_debounce_ms(self) -> int:
        return self._rules.section_debounce_ms

    def get_visibility_line_ratio(self) -> float:
        return self._rules.visibility_line_ratio


class DashboardRulesAdapter:
    def __init__(self, rules: Rules):
        self._rules = rules.dashboard

    def get_geographic_limit(self) -> int:
        return self._rules.geographic_limit

    def get_traffic_source_limit(self) -> int:
        return self._rules.traffic_source_limit

    def get_high_bounce_threshold(self) -> float:
        return self._rules.high_bounce_threshold

    def get_room_sort(self) -> str:
        return self._rules.room_sort
