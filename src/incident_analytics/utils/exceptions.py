class IncidentAnalyticsError(Exception):
    """Base Exception Class"""
    pass
class ReportFetchError(IncidentAnalyticsError):
    """Error class for when the analysis service can't be reached or returns an unusable payload"""
    pass
class SnapshotBuildError(IncidentAnalyticsError):
    """Unexpected failure while building an analytics snapshot"""
    pass
class ConfigError(IncidentAnalyticsError):
    """Config Error"""
    pass
