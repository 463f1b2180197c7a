from __future__ import annotations

from typing import Dict, List

from curator.models import DEFAULT_LANGUAGE


TEXTS: Dict[str, Dict[str, object]] = {
    "en": {
        "landingTitle": ["The", "2025", "Gallery"],
        "createBtn": "Create your gallery",
        "viewMyBtn": "Visit My Collection",
        "curatedBy": "Curated by The Cat Curator",
        "curatorQuote": "Turn your memories into a masterpiece.",
        "poweredBy": "Powered by Gemini AI",
        "questionPrefix": "Collection No.",
        "placeholder": "Draft your memory...",
        "addPhoto": "Add Reference",
        "generate": "Create Art",
        "generatingTitle": "Creating your piece...",
        "generatingSubtitle": "Interpreting memory...",
        "generationFailed": "The canvas slipped! Please try again.",
        "curatorNote": "Curator's Note",
        "next": "Next Memory",
        "finish": "Finish Exhibition",
        "imgNotAvailable": "Image not available",
        "galleryTitle": "The 2025 Collection",
        "gallerySubtitle": "Curated by You & The Cat Curator",
        "exhibit": "Exhibit",
        "endTitle": "End of Exhibition",
        "endSubtitle": "Your 2025 has been immortalized.",
        "saveFailed": "Your exhibition could not be saved.",
        "retrySave": "Try saving again",
        "restart": "Start New Exhibition",
        "artworkTitle": "The Artwork",
        "questionTitle": "The Question",
        "memoryTitle": "The Memory",
        "oilOnCanvas": "Oil on Canvas (Digital)",
    },
    "zh": {
        "landingTitle": ["2025", "记忆", "美术馆"],
        "createBtn": "开启你的展览",
        "viewMyBtn": "进入我的展览",
        "curatedBy": "策展人：猫咪馆长",
        "curatorQuote": "“把你的记忆变为永恒的艺术。”",
        "poweredBy": "由 Gemini AI 驱动",
        "questionPrefix": "藏品编号",
        "placeholder": "写下你的回忆...",
        "addPhoto": "添加参考图",
        "generate": "生成画作",
        "generatingTitle": "正在创作中...",
        "generatingSubtitle": "解读记忆...",
        "generationFailed": "画布滑落了！请再试一次。",
        "curatorNote": "馆长寄语",
        "next": "下一个记忆",
        "finish": "完成展览",
        "imgNotAvailable": "图片不可用",
        "galleryTitle": "2025 年度展",
        "gallerySubtitle": "策展人：你 & 猫咪馆长",
        "exhibit": "展品",
        "endTitle": "展览结束",
        "endSubtitle": "你的2025已被珍藏。",
        "saveFailed": "你的展览未能保存。",
        "retrySave": "重新保存",
        "restart": "开启新展览",
        "artworkTitle": "画作",
        "questionTitle": "问题",
        "memoryTitle": "记忆",
        "oilOnCanvas": "布面油画 (数字版)",
    },
}

QUESTIONS: Dict[str, List[str]] = {
    "en": [
        "If you had to describe 2025 in three words, which ones would you choose?",
        "Looking back at the year, do you feel fulfilled or is there a hint of regret?",
        "If you could say one thing to yourself from exactly one year ago, what would it be?",
        "New Experiences: Did you visit any new places? See any unforgettable scenery? "
        "Meet any new friends?",
        "Did you try anything this year that you had never done before? "
        "Any new skills or hobbies?",
        "Did you have a favorite song, book, movie, or TV series this year?",
        "Joy & Sorrow: What was one moment this year that made you feel truly happy or warm?",
        "Was there a moment that felt suffocating or incredibly difficult? "
        "Have you healed from it?",
        "Finally, what was your biggest lesson? If you could live this year over again, "
        "what would you do differently?",
    ],
    "zh": [
        "如果让你用三个词语来形容2025？你会用哪三个词语？",
        "站在年末的视角回望这一年会觉得圆满还是有一点遗憾？",
        "假如可以给去年这个时候的自己说一句话会说什么呢？",
        "新的体验类：有没有去到一些新的地方？路上难忘的风景？有没有认识新的朋友以及如何成为朋友的？",
        "今年有没有尝试过之前没有做过的事情，体验如何？新技能和爱好？",
        "今年有没有特别喜欢的歌，书或者电影或者剧集？",
        "快乐 & 悲伤的时刻：今年让你感到幸福或者温暖的一个瞬间？",
        "有没有让你感觉很难受无法呼吸的时刻？现在走出来了吗？想和当时的自己说些什么吗？",
        "有收获的事情，如果再来一次会怎么做？",
    ],
}


def texts_for(language: str) -> Dict[str, object]:
    return TEXTS.get(language, TEXTS[DEFAULT_LANGUAGE])


def questions_for(language: str) -> List[str]:
    return list(QUESTIONS.get(language, QUESTIONS[DEFAULT_LANGUAGE]))


def text(language: str, key: str) -> str:
    value = texts_for(language).get(key)
    if value is None:
        value = TEXTS[DEFAULT_LANGUAGE][key]
    return str(value)
