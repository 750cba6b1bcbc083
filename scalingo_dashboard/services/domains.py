from typing import List

from scalingo_dashboard.models.domain import Domain


def primary_domain(domains: List[Domain]) -> Domain | None:
    """Канонический домен, иначе первый домен с SSL, иначе просто первый."""
    for domain in domains:
        if domain.canonical:
            return domain
    for domain in domains:
        if domain.ssl:
            return domain
    return domains[0] if domains else None


def domain_url(domain: Domain) -> str:
    protocol = "https" if domain.ssl else "http"
    return f"{protocol}://{domain.name}"
