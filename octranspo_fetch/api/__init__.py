from octranspo_fetch.api.gateway import OCT_NS, OCTranspoGateway, ResultNode

__all__ = ["OCT_NS", "OCTranspoGateway", "ResultNode"]
