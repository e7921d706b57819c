"""Title normalization for consistent scene matching."""

import re

_SPAM_TAIL_RE = re.compile(
    r"\s+(want more|watch and download|get of accounts|backup/latest|to watch video|#hd|#in).*",
    re.IGNORECASE,
)
_LINK_RES = (
    re.compile(r"t\.me/\S+", re.IGNORECASE),
    re.compile(r"https?://\S+", re.IGNORECASE),
    re.compile(r"ftp://\S+", re.IGNORECASE),
    re.compile(r"www\.\S+", re.IGNORECASE),
    re.compile(r"[a-z0-9-]+\.(com|net|org|io|to|cc|tv|xxx|html)\S*", re.IGNORECASE),
    re.compile(r"\b(savefiles|lulustream|doodstream|streamtape|bigwarp)\.[\w/]+", re.IGNORECASE),
)
_PLATFORM_RE = re.compile(
    r"\b(onlyfans|manyvids|fansly|patreon|fancentro|pornhub|xvideos|chaturbate|cam4|"
    r"myfreecams|mfc|streamate|mrluckyraw|tagteampov|baddiesonlypov)[-.\s]*",
    re.IGNORECASE,
)
_SPAM_WORD_RE = re.compile(
    r"\b(new|full|xxx|nsfw|leaked|exclusive|premium|vip|hot|sexy|latest|hd|rq)\b",
    re.IGNORECASE,
)
_DATE_RES = (
    re.compile(r"\b\d{2}\s+\d{2}\s+\d{2}\b"),
    re.compile(r"\b\d{4}\s+\d{2}\s+\d{2}\b"),
    re.compile(r"\b(19|20)\d{2}[-_.]\d{2}[-_.]\d{2}\b"),
    re.compile(r"\b(19|20)\d{2}\b"),
)
_TAG_RES = (
    re.compile(r"\b(2160p|1080p|720p|480p|4k|uhd|hd|sd)\b", re.IGNORECASE),
    re.compile(r"\b(web-?dl|webrip|bluray|blu-ray|hdtv|dvdrip|bdrip|brrip)\b", re.IGNORECASE),
    re.compile(r"\b(h\.?264|h\.?265|x264|x265|hevc|avc|mpeg|divx|xvid)\b", re.IGNORECASE),
    re.compile(r"\b(aac|ac3|dts|flac|mp3|dd5\.1|dd2\.0|atmos)\b", re.IGNORECASE),
    re.compile(r"\b(mp4|mkv|avi|wmv|mov|flv|m4v|ts|mpg|mpeg)\b", re.IGNORECASE),
)
_RELEASE_TAG_RE = re.compile(
    r"\b(repack|proper|real|retail|extended|unrated|directors?\.cut|remastered|xleech|p2p|xc)\b",
    re.IGNORECASE,
)


class TitleNormalizer:
    """Stateless helpers; every method is a pure function of its input."""

    @staticmethod
    def normalize(title: str) -> str:
        """Lowercase with special characters folded into single spaces."""
        text = title.lower()
        text = re.sub(r"[^\w\s]", " ", text)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    @staticmethod
    def extract_core_title(title: str) -> str:
        """Strip release metadata and indexer spam, keeping the scene title.

        Falls back to the input when nothing would be left.
        """
        cleaned = _SPAM_TAIL_RE.sub("", title)
        for pattern in _LINK_RES:
            cleaned = pattern.sub("", cleaned)

        cleaned = re.sub(r"[-=]>", " ", cleaned)
        cleaned = re.sub(r"<[-=]", " ", cleaned)
        cleaned = re.sub(r"\\r\\n|\\n", " ", cleaned)

        cleaned = _PLATFORM_RE.sub("", cleaned)
        cleaned = _SPAM_WORD_RE.sub("", cleaned)
        for pattern in _DATE_RES:
            cleaned = pattern.sub("", cleaned)
        for pattern in _TAG_RES:
            cleaned = pattern.sub("", cleaned)

        # Release group
        cleaned = re.sub(r"\[.*?\]", "", cleaned)
        cleaned = re.sub(r"\(.*?\)", "", cleaned)

        cleaned = re.sub(r"\b\d+(\.\d+)?\s?(gb|mb|gib|mib)\b", "", cleaned, flags=re.IGNORECASE)
        cleaned = re.sub(r"\b(s\d{2}e\d{2}|e\d{2,3})\b", "", cleaned, flags=re.IGNORECASE)
        cleaned = _RELEASE_TAG_RE.sub("", cleaned)

        cleaned = cleaned.replace('\\"', '"')
        cleaned = re.sub(r"[-_.]{2,}", " ", cleaned)
        cleaned = re.sub(r"\s+", " ", cleaned).strip()
        cleaned = re.sub(r'^[-_.,"]+|[-_.,"]+$', "", cleaned)

        return cleaned or title

    @classmethod
    def remove_metadata(cls, title: str) -> str:
        return cls.normalize(cls.extract_core_title(title))

    @classmethod
    def tokenize(cls, title: str) -> list[str]:
        return [word for word in cls.normalize(title).split() if word]

    @staticmethod
    def length_ratio(title1: str, title2: str) -> float:
        """Shorter length over longer length; 0 when either is empty."""
        len1, len2 = len(title1), len(title2)
        if len1 == 0 or len2 == 0:
            return 0.0
        return min(len1, len2) / max(len1, len2)

    @staticmethod
    def is_partial_match(shorter: str, longer: str, min_length: int = 20) -> bool:
        return len(shorter) >= min_length and longer.startswith(shorter)
