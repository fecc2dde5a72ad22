"""Keyword and synonym tables used by the label heuristics."""

from ..models.schemas import BeverageType

# Consumer-facing wording typical of the brand panel
FRONT_LABEL_KEYWORDS = (
    "reserve",
    "estate",
    "vintage",
    "aged",
    "barrel",
    "single malt",
    "small batch",
    "craft",
    "limited edition",
    "special release",
)

# Regulatory fine print typical of the back panel
BACK_LABEL_KEYWORDS = (
    "government warning",
    "according to the surgeon general",
    "women should not drink",
    "contains sulfites",
    "name and address",
    "produced and bottled by",
    "produced & bottled by",
    "bottled by",
    "distilled by",
    "imported by",
    "vinted by",
    "cellared by",
    "net contents",
    "alc.",
    "alc ",
    "% by vol",
    "by volume",
)

BEVERAGE_TYPE_KEYWORDS = {
    BeverageType.DISTILLED_SPIRITS: (
        "whiskey", "whisky", "bourbon", "vodka", "gin", "rum", "tequila",
        "mezcal", "brandy", "cognac", "scotch", "proof", "distilled by",
        "distilled from", "blended whiskey", "straight bourbon",
        "single malt", "rye whiskey", "corn whiskey", "liqueur", "cordial",
        "absinthe", "schnapps", "grappa", "pisco", "soju", "shochu",
        "baijiu", "aquavit", "moonshine",
    ),
    BeverageType.WINE: (
        "wine", "cabernet", "chardonnay", "merlot", "pinot", "sauvignon",
        "riesling", "zinfandel", "syrah", "shiraz", "malbec", "tempranillo",
        "sangiovese", "moscato", "prosecco", "champagne", "vintage",
        "sulfites", "contains sulfites", "appellation", "vineyard",
        "estate bottled", "vinted by", "cellared by", "produced and bottled",
        "viognier", "gewurztraminer", "grenache", "rosé", "rose",
        "sparkling", "varietal", "cuvée", "cuvee", "sommelier", "terroir",
    ),
    BeverageType.MALT_BEVERAGE: (
        "ale", "lager", "beer", "stout", "ipa", "porter", "pilsner",
        "brewed by", "brewed with", "brewing", "brewery", "craft beer",
        "wheat beer", "hefeweizen", "pale ale", "amber ale", "brown ale",
        "sour ale", "session ale", "double ipa", "imperial stout",
        "hard seltzer", "hard cider", "malt liquor", "malt beverage",
        "flavored malt", "hops", "barley", "saison", "gose", "kölsch",
        "kolsch", "bock", "dunkel", "märzen", "marzen",
    ),
}

# Accepted variants per field: canonical name -> wordings that mean the same.
# Labels rarely print the formal class designation from the application.
ACCEPTED_VARIANTS = {
    "class_type": {
        # === BEER ===
        "IPA": {"IPA", "INDIA PALE ALE", "INDIAN PALE ALE"},
        "DIPA": {"DIPA", "DOUBLE INDIA PALE ALE", "DOUBLE IPA", "IMPERIAL IPA"},
        "NEIPA": {"NEIPA", "NEW ENGLAND IPA", "NEW ENGLAND INDIA PALE ALE", "HAZY IPA"},
        "ESB": {"ESB", "EXTRA SPECIAL BITTER", "ENGLISH SPECIAL BITTER"},
        "STOUT": {"STOUT", "IMPERIAL STOUT", "MILK STOUT", "DRY STOUT", "OATMEAL STOUT"},
        "PILSNER": {"PILSNER", "PILS", "CZECH PILSNER", "GERMAN PILSNER"},
        "WHEAT BEER": {"WHEAT BEER", "HEFEWEIZEN", "WEISSBIER", "WITBIER", "WHITE ALE"},
        "SAISON": {"SAISON", "FARMHOUSE ALE"},
        "KOLSCH": {"KOLSCH", "KÖLSCH"},
        "MALT BEVERAGE": {"MALT BEVERAGE", "FLAVORED MALT BEVERAGE", "FMB"},
        # === SPIRITS ===
        "BOURBON": {
            "BOURBON", "KENTUCKY STRAIGHT BOURBON WHISKEY", "STRAIGHT BOURBON WHISKEY",
            "BOURBON WHISKEY", "KENTUCKY BOURBON", "STRAIGHT BOURBON",
        },
        "RYE": {"RYE WHISKEY", "STRAIGHT RYE WHISKEY", "RYE WHISKY"},
        "TENNESSEE WHISKEY": {"TENNESSEE WHISKEY", "TENNESSEE WHISKY"},
        "SCOTCH": {
            "SCOTCH", "SCOTCH WHISKY", "SINGLE MALT SCOTCH WHISKY",
            "BLENDED SCOTCH WHISKY", "SINGLE MALT SCOTCH",
        },
        "IRISH WHISKEY": {"IRISH WHISKEY", "IRISH WHISKY"},
        "WHISKEY": {"WHISKEY", "WHISKY"},
        "GIN": {"GIN", "LONDON DRY GIN", "DRY GIN"},
        "BRANDY": {"BRANDY", "GRAPE BRANDY"},
        "LIQUEUR": {"LIQUEUR", "CORDIAL"},
        # === WINE ===
        "ROSE WINE": {"ROSE WINE", "ROSÉ WINE", "ROSÉ", "ROSE"},
        "SPARKLING WINE": {"SPARKLING WINE", "SPARKLING"},
        "TABLE WINE": {"TABLE WINE", "RED TABLE WINE", "WHITE TABLE WINE"},
    },
    "grape_varietal": {
        "CABERNET SAUVIGNON": {"CABERNET SAUVIGNON", "CAB SAUV", "CABERNET"},
        "CHARDONNAY": {"CHARDONNAY", "CHARD"},
        "SAUVIGNON BLANC": {"SAUVIGNON BLANC", "SAV BLANC", "FUME BLANC", "FUMÉ BLANC"},
        "SHIRAZ": {"SHIRAZ", "SYRAH"},
        "PINOT GRIS": {"PINOT GRIS", "PINOT GRIGIO"},
        "ZINFANDEL": {"ZINFANDEL", "ZIN"},
    },
    "state_of_distillation": {
        "KENTUCKY": {"KENTUCKY", "KY"},
        "TENNESSEE": {"TENNESSEE", "TN"},
        "INDIANA": {"INDIANA", "IN"},
        "TEXAS": {"TEXAS", "TX"},
    },
}
