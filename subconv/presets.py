"""Built-in rule catalogue, preset bundles and outbound labels."""

from __future__ import annotations

from typing import NamedTuple


class PresetRule(NamedTuple):
    name: str
    site: tuple[str, ...] = ()
    ip: tuple[str, ...] = ()
    catch_all: bool = False


# Curated order; first match wins in every backend.
CATALOGUE: tuple[PresetRule, ...] = (
    PresetRule("Ad Block", site=("category-ads-all",)),
    PresetRule("AI Services", site=("category-ai-!cn",)),
    PresetRule("Bilibili", site=("bilibili",)),
    PresetRule("Youtube", site=("youtube",)),
    PresetRule("Google", site=("google",), ip=("google",)),
    PresetRule("Private", ip=("private",)),
    PresetRule("Location:CN", site=("geolocation-cn", "cn"), ip=("cn",)),
    PresetRule("Telegram", ip=("telegram",)),
    PresetRule("Github", site=("github", "gitlab")),
    PresetRule("Microsoft", site=("microsoft",)),
    PresetRule("Apple", site=("apple",)),
    PresetRule(
        "Social Media",
        site=("facebook", "instagram", "twitter", "tiktok", "linkedin"),
    ),
    PresetRule(
        "Streaming",
        site=("netflix", "hulu", "disney", "hbo", "amazon", "bahamut"),
    ),
    PresetRule("Gaming", site=("steam", "epicgames", "ea", "ubisoft", "blizzard")),
    PresetRule(
        "Education",
        site=("coursera", "edx", "udemy", "khanacademy", "category-scholar-!cn"),
    ),
    PresetRule("Financial", site=("paypal", "visa", "mastercard", "stripe", "wise")),
    PresetRule(
        "Cloud Services",
        site=("aws", "azure", "digitalocean", "heroku", "dropbox"),
    ),
    PresetRule("Non-China", site=("geolocation-!cn",), catch_all=True),
)

CATALOGUE_NAMES = frozenset(rule.name for rule in CATALOGUE)

PRESETS: dict[str, tuple[str, ...]] = {
    "minimal": ("Location:CN", "Private", "Non-China"),
    "balanced": (
        "Non-China",
        "Private",
        "Location:CN",
        "Github",
        "Google",
        "Youtube",
        "AI Services",
        "Telegram",
    ),
    "comprehensive": tuple(rule.name for rule in CATALOGUE),
}

DEFAULT_LANG = "zh-CN"

OUTBOUND_LABELS: dict[str, dict[str, str]] = {
    "zh-CN": {
        "Ad Block": "🛑 广告拦截",
        "AI Services": "💬 AI 服务",
        "Bilibili": "📺 哔哩哔哩",
        "Youtube": "📹 油管视频",
        "Google": "🔍 谷歌服务",
        "Private": "🏠 私有网络",
        "Location:CN": "🔒 国内服务",
        "Telegram": "📲 电报消息",
        "Github": "🐱 Github",
        "Microsoft": "Ⓜ️ 微软服务",
        "Apple": "🍏 苹果服务",
        "Social Media": "🌐 社交媒体",
        "Streaming": "🎬 流媒体",
        "Gaming": "🎮 游戏平台",
        "Education": "📚 教育资源",
        "Financial": "💰 金融服务",
        "Cloud Services": "☁️ 云服务",
        "Non-China": "🌐 非中国",
        "Node Select": "🚀 节点选择",
        "Fall Back": "🐟 漏网之鱼",
    },
    "en-US": {
        "Ad Block": "🛑 Ad Block",
        "AI Services": "💬 AI Services",
        "Bilibili": "📺 Bilibili",
        "Youtube": "📹 Youtube",
        "Google": "🔍 Google",
        "Private": "🏠 Private",
        "Location:CN": "🔒 China Services",
        "Telegram": "📲 Telegram",
        "Github": "🐱 Github",
        "Microsoft": "Ⓜ️ Microsoft",
        "Apple": "🍏 Apple",
        "Social Media": "🌐 Social Media",
        "Streaming": "🎬 Streaming",
        "Gaming": "🎮 Gaming",
        "Education": "📚 Education",
        "Financial": "💰 Financial",
        "Cloud Services": "☁️ Cloud Services",
        "Non-China": "🌐 Non-China",
        "Node Select": "🚀 Node Select",
        "Fall Back": "🐟 Fall Back",
    },
}


def outbound_label(name: str, lang: str) -> str:  # noqa: D103
    labels = OUTBOUND_LABELS.get(lang, OUTBOUND_LABELS[DEFAULT_LANG])
    return labels.get(name, name)
