from datetime import date, datetime

import pytest

from schoolms.cache.keys import (
    entity_key,
    entity_patterns,
    escape_qualifier,
    list_key,
    list_pattern,
    scope_pattern,
    scoped_key,
    scoped_list_key,
    scoped_list_pattern,
    static_key,
    tag_pattern,
    view_key,
)
from schoolms.schemas.common import SearchRequest


class TestKeyFormat:
    def test_entity_and_view_keys(self):
        assert entity_key("student", 5).render() == "student_5"
        assert view_key("student", "dashboard", 5).render() == "student_dashboard_5"
        assert str(view_key("teacher", "detail", 2)) == "teacher_detail_2"

    def test_list_key_layout(self):
        request = SearchRequest(search="ann", page=2, page_size=20, sort_by="name")

        key = list_key("student", request)

        assert key.render() == "student_list_ann_2_20_name_False"
        assert key.tags == frozenset({"student_list"})

    def test_list_key_defaults(self):
        assert list_key("course").render() == "course_list__1_10__False"

    def test_scoped_list_key_tags(self):
        key = scoped_list_key("class", 3, "student", SearchRequest())

        assert key.render() == "class_3_student_list__1_10__False"
        assert key.tags == frozenset(
            {"class_3_student_list", "class_3", "class_student_list"}
        )

    def test_scoped_key(self):
        key = scoped_key("student", 4, "attendance_summary", "course", 9)

        assert key.render() == "student_4_attendance_summary_course_9"
        assert "student_attendance_summary" in key.tags

    def test_static_key(self):
        assert static_key("role", "list").render() == "role_list"

    def test_dates_are_compact(self):
        assert escape_qualifier(date(2024, 3, 1)) == "20240301"
        assert escape_qualifier(datetime(2024, 3, 1, 8, 30)) == "20240301083000"


class TestKeyIdentity:
    def test_same_request_same_key(self):
        a = list_key("student", SearchRequest(search="x", page=3))
        b = list_key("student", SearchRequest(search="x", page=3))

        assert a.render() == b.render()

    @pytest.mark.parametrize(
        "changes",
        [
            {"search": "bob"},
            {"page": 2},
            {"page_size": 25},
            {"sort_by": "last_name"},
            {"sort_descending": True},
        ],
    )
    def test_each_qualifier_changes_key(self, changes):
        base = list_key("student", SearchRequest())
        changed = list_key("student", SearchRequest(**changes))

        assert base.render() != changed.render()

    def test_blank_search_keys_like_none(self):
        assert (
            list_key("student", SearchRequest(search="   ")).render()
            == list_key("student", SearchRequest(search=None)).render()
        )

    def test_separator_in_search_cannot_shift_slots(self):
        # "a_2" on page 1 would otherwise render like search "a" on page 2
        tricky = list_key("student", SearchRequest(search="a_2", page=1, page_size=10))
        plain = list_key("student", SearchRequest(search="a", page=2, page_size=10))

        assert tricky.render() != plain.render()
        assert "_" not in escape_qualifier("a_2")

    def test_escape_is_injective_for_percent(self):
        assert escape_qualifier("a%5Fb") != escape_qualifier("a_b")

    def test_search_qualifier_is_separate_from_paging(self):
        all_users = list_key("user", SearchRequest(search="search"))
        searched = list_key("user", SearchRequest(), "search", "x")

        assert all_users.render() != searched.render()


class TestPatterns:
    def test_entity_patterns(self):
        assert entity_patterns("student", 5) == ("student_5", "student_detail_5")

    def test_prefix_patterns(self):
        assert list_pattern("student") == "student_list_*"
        assert scoped_list_pattern("class", 3, "student") == "class_3_student_list_*"
        assert scope_pattern("student", 4) == "student_4_*"
        assert scope_pattern("student", 4, "course") == "student_4_course_*"

    def test_tag_pattern(self):
        assert tag_pattern("student_assignment_list") == "tag:student_assignment_list"
