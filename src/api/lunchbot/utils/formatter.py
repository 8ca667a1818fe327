from typing import Union

from lunchbot.forkable.errors import ForkableError
from lunchbot.models import DeliverySummary

NO_LUNCH_MESSAGE = "No lunch ordered"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


def format_lunch_response(result: Union[DeliverySummary, ForkableError]) -> str:
    """
    ランチの取得結果を返信用のテキストに変換する

    :param result: 取得結果（DeliverySummary）またはエラー
    :return: "レストラン名: 品目1, 品目2" を". " で連結した文字列
    """
    if isinstance(result, ForkableError):
        return result.message or UNKNOWN_ERROR_MESSAGE
    if not isinstance(result, DeliverySummary):
        return UNKNOWN_ERROR_MESSAGE

    responses = [f"{order.restaurant}: {', '.join(order.items)}" for order in result.lunch if order.items]
    return ". ".join(responses) if responses else NO_LUNCH_MESSAGE
