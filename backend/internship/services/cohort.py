"""
Cohort (class) name resolution.

A student's class is derived from their email address. The resolver is a
plain callable so deployments with a different roll-number scheme can swap it
without touching the profile flow.
"""

from typing import Callable

CohortResolver = Callable[[str], str]


def email_prefix_cohort(email: str, length: int = 4) -> str:
    """
    First `length` characters of the email address, uppercased.

    >>> email_prefix_cohort("21mx101@psgtech.ac.in")
    '21MX'
    """
    return email[:length].upper()


def prefix_cohort_resolver(length: int) -> CohortResolver:
    """Resolver bound to a configured prefix length"""
    def resolve(email: str) -> str:
        return email_prefix_cohort(email, length)
    return resolve
