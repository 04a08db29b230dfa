"""
Collectors - remote data access and query orchestration

    - autostrike_rest_client: typed client for the AutoStrike REST API
    - query_cache: keyed single-flight cache shared by every data owner
    - analytics_orchestrator: comparison/trend/summary queries behind one view
    - scenario_catalog: cached scenario listing and the run action
"""
