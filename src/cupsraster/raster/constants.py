"""ラスタヘッダーの列挙値定義

ページヘッダー内の列挙型フィールドが取りうる値を定義する。
ヘッダー自体は未知の値も保持できるよう生の整数を格納するため、
ここでの列挙型は比較・表示用に使用する。
"""

from enum import IntEnum


class AdvanceMedia(IntEnum):
    """用紙送りのタイミング"""

    NEVER = 0
    AFTER_FILE = 1
    AFTER_JOB = 2
    AFTER_SET = 3
    AFTER_PAGE = 4


class CutMedia(IntEnum):
    """用紙カットのタイミング"""

    NEVER = 0
    AFTER_FILE = 1
    AFTER_JOB = 2
    AFTER_SET = 3
    AFTER_PAGE = 4


class Jog(IntEnum):
    """排紙ずらしのタイミング"""

    NEVER = 0
    AFTER_FILE = 1
    AFTER_JOB = 2
    AFTER_SET = 3


class LeadingEdge(IntEnum):
    """給紙方向の先端"""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3


class Orientation(IntEnum):
    """ページの回転"""

    NONE = 0
    COUNTER_CLOCKWISE = 1
    UPSIDE_DOWN = 2
    CLOCKWISE = 3


class ColorOrder(IntEnum):
    """色の並び順

    CHUNKY: 1ピクセルの全チャンネルが連続して格納される
    BANDED: 1行ごとにチャンネル単位で格納される
    PLANAR: ページ全体がチャンネル単位で格納される
    """

    CHUNKY = 0
    BANDED = 1
    PLANAR = 2


class ColorSpace(IntEnum):
    """色空間"""

    GRAY = 0
    RGB = 1
    RGBA = 2
    BLACK = 3
    CMY = 4
    YMC = 5
    CMYK = 6
    YMCK = 7
    KCMY = 8
    KCMYCM = 9
    GMCK = 10
    GMCS = 11
    WHITE = 12
    GOLD = 13
    SILVER = 14
    CIEXYZ = 15
    CIELAB = 16
    RGBW = 17
    SGRAY = 18
    SRGB = 19
    ADOBE_RGB = 20
    ICC1 = 32
    ICC2 = 33
    ICC3 = 34
    ICC4 = 35
    ICC5 = 36
    ICC6 = 37
    ICC7 = 38
    ICC8 = 39
    ICC9 = 40
    ICCA = 41
    ICCB = 42
    ICCC = 43
    ICCD = 44
    ICCE = 45
    ICCF = 46
    DEVICE1 = 48
    DEVICE2 = 49
    DEVICE3 = 50
    DEVICE4 = 51
    DEVICE5 = 52
    DEVICE6 = 53
    DEVICE7 = 54
    DEVICE8 = 55
    DEVICE9 = 56
    DEVICEA = 57
    DEVICEB = 58
    DEVICEC = 59
    DEVICED = 60
    DEVICEE = 61
    DEVICEF = 62


def describe(enum_type: type[IntEnum], value: int) -> str:
    """列挙値を表示用の文字列に変換する

    Args:
        enum_type: 対象の列挙型
        value: ヘッダーに格納された生の値

    Returns:
        既知の値なら列挙名、未知の値なら数値の文字列
    """
    try:
        return enum_type(value).name
    except ValueError:
        return str(value)
