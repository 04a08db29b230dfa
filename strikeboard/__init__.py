"""
AutoStrike Dashboard - Client Data Layer

This package contains the data orchestration behind the AutoStrike security-testing
dashboard: remote queries, caching, scenario import/export and chart projections.

Package Structure:
    - core: Infrastructure (logging)
    - domain: Domain models (Period, ScoreTrend, Scenario, ImportResult)
    - collectors: Remote data client, query cache and orchestrators
    - scenarios: Scenario import/export reconciliation
    - dashboards: Chart-ready projections of fetched data
"""

__version__ = "1.0.0"
__author__ = "AutoStrike Dashboard Team"
