from octranspo_fetch.monitoring.stats import ClientStats

__all__ = ["ClientStats"]
