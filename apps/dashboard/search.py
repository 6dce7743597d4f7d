"""Global search across clients, projects and invoices using fuzzy matching."""

import re
from typing import List

from fuzzywuzzy import fuzz

from apps.clients.models import Client
from apps.invoices.models import Invoice
from apps.projects.models import Project

# Minimum partial_ratio score for a fuzzy hit
FUZZY_THRESHOLD = 70
MAX_RESULTS = 10
MIN_QUERY_LENGTH = 2


def normalize_text(text: str) -> str:
    text = (text or '').lower().strip()
    return re.sub(r'\s+', ' ', text)


def match_score(query: str, *fields) -> int:
    """
    Best score of ``query`` against the given fields.

    A substring hit scores 100; otherwise the best ``partial_ratio``.
    """
    best = 0
    for field in fields:
        value = normalize_text(field)
        if not value:
            continue
        if query in value:
            return 100
        best = max(best, fuzz.partial_ratio(query, value))
    return best


def _client_results(user, query: str) -> list:
    results = []
    for client in Client.objects.filter(owner=user).only('id', 'name', 'company', 'email'):
        score = match_score(query, client.name, client.company, client.email)
        if score >= FUZZY_THRESHOLD:
            results.append({
                'type': 'client',
                'id': str(client.id),
                'title': client.name,
                'subtitle': client.company or client.email,
                'score': score,
            })
    return results


def _project_results(user, query: str) -> list:
    results = []
    for project in Project.objects.filter(owner=user).select_related('client'):
        score = match_score(query, project.name)
        if score >= FUZZY_THRESHOLD:
            results.append({
                'type': 'project',
                'id': str(project.id),
                'title': project.name,
                'subtitle': project.client.name,
                'score': score,
            })
    return results


def _invoice_results(user, query: str) -> list:
    results = []
    for invoice in Invoice.objects.filter(owner=user).select_related('client'):
        score = match_score(query, invoice.invoice_number, invoice.client.name)
        if score >= FUZZY_THRESHOLD:
            results.append({
                'type': 'invoice',
                'id': str(invoice.id),
                'title': invoice.invoice_number,
                'subtitle': invoice.client.name,
                'score': score,
            })
    return results


def search(user, query: str, limit: int = MAX_RESULTS) -> List[dict]:
    """
    Search the user's clients, projects and invoices.

    Returns:
        Up to ``limit`` results, best score first
    """
    query = normalize_text(query)
    if len(query) < MIN_QUERY_LENGTH:
        return []

    results = _client_results(user, query) + _project_results(user, query) + _invoice_results(user, query)
    results.sort(key=lambda r: (-r['score'], r['title'].lower()))
    return results[:limit]
