import pytest

from apps.clients.models import Client
from apps.dashboard.search import match_score, normalize_text, search


class TestMatchScore:

    def test_normalize_collapses_whitespace(self):
        assert normalize_text('  Acme \n  Corp ') == 'acme corp'

    def test_substring_scores_full(self):
        assert match_score('acme', 'Acme Corp') == 100

    def test_typo_scores_fuzzy(self):
        score = match_score('webiste', 'Website Redesign')

        assert 70 <= score < 100

    def test_empty_fields_ignored(self):
        assert match_score('acme', None, '') == 0


@pytest.mark.django_db
class TestSearch:

    def test_short_query(self, user, client_record):
        assert search(user, ' a ') == []

    def test_matches_across_types(self, user, invoice):
        results = search(user, 'acme')

        assert [(r['type'], r['title']) for r in results] == [
            ('client', 'Acme Corp'),
            ('invoice', 'INV-0001'),
        ]
        assert results[0]['subtitle'] == 'Acme'

    def test_fuzzy_project_match(self, user, project):
        results = search(user, 'webiste')

        assert results[0]['type'] == 'project'
        assert results[0]['subtitle'] == 'Acme Corp'

    def test_only_own_records(self, user, other_client_record):
        assert search(user, 'globex') == []

    def test_limit(self, user):
        for index in range(12):
            Client.objects.create(owner=user, name=f'Northwind {index:02d}', email=f'nw{index}@example.com')

        results = search(user, 'northwind')

        assert len(results) == 10
        assert results[0]['title'] == 'Northwind 00'
