"""
SmartCalc Constants Module
Contains the lookup tables shared by the tokenizer, parser and domain evaluators.
"""

import math


# =============================================================================
# MATHEMATICAL FUNCTIONS
# =============================================================================

# One-argument functions callable from expressions (trig in radians)
MATH_FUNCS = {
    'sin': math.sin, 'cos': math.cos, 'tan': math.tan,
    'asin': math.asin, 'acos': math.acos, 'atan': math.atan,
    'sqrt': math.sqrt, 'abs': abs,
    'ln': math.log,      # natural log
    'log': math.log10,   # base 10
}

FUNCTION_NAMES = set(MATH_FUNCS)


# =============================================================================
# OPERATOR PRECEDENCE
# =============================================================================

PREC_COMPARISON = 5
PREC_ADDITIVE = 10
PREC_MULTIPLICATIVE = 20
PREC_POWER = 30


# =============================================================================
# CURRENCY CONSTANTS
# =============================================================================

# Units of currency per US dollar, used when live rates are disabled or unavailable
FALLBACK_RATES = {
    'usd': 1.0,
    'eur': 0.85, 'gbp': 0.73, 'jpy': 110.0, 'cad': 1.25,
    'aud': 1.35, 'chf': 0.92, 'cny': 6.45, 'inr': 74.5,
    'krw': 1180.0, 'mxn': 20.1, 'brl': 5.2, 'sek': 8.6,
    'nok': 8.4, 'dkk': 6.3, 'pln': 3.9, 'nzd': 1.42,
    'sgd': 1.34, 'hkd': 7.8, 'zar': 14.2, 'uah': 41.0,
}

# Spoken currency names -> ISO code
CURRENCY_ABBR = {
    'dollar': 'usd', 'dollars': 'usd', 'usd': 'usd', '$': 'usd',
    'euro': 'eur', 'euros': 'eur', 'eur': 'eur',
    'pound': 'gbp', 'pounds': 'gbp', 'gbp': 'gbp', 'sterling': 'gbp',
    'yen': 'jpy', 'jpy': 'jpy',
    'canadian dollar': 'cad', 'canadian dollars': 'cad', 'cad': 'cad',
    'australian dollar': 'aud', 'australian dollars': 'aud', 'aud': 'aud',
    'franc': 'chf', 'francs': 'chf', 'swiss franc': 'chf', 'chf': 'chf',
    'yuan': 'cny', 'rmb': 'cny', 'cny': 'cny',
    'rupee': 'inr', 'rupees': 'inr', 'inr': 'inr',
    'won': 'krw', 'krw': 'krw',
    'peso': 'mxn', 'pesos': 'mxn', 'mxn': 'mxn',
    'real': 'brl', 'reais': 'brl', 'brl': 'brl',
    'krona': 'sek', 'kronor': 'sek', 'sek': 'sek',
    'krone': 'nok', 'kroner': 'nok', 'nok': 'nok',
    'dkk': 'dkk', 'zloty': 'pln', 'pln': 'pln',
    'nzd': 'nzd', 'sgd': 'sgd', 'hkd': 'hkd',
    'rand': 'zar', 'zar': 'zar',
    'hryvnia': 'uah', 'uah': 'uah',
}

# ISO code -> label shown after a converted amount
CURRENCY_DISPLAY = {code: code.upper() for code in FALLBACK_RATES}


# =============================================================================
# UNIT CONVERSION CONSTANTS
# =============================================================================

# Spoken unit names -> pint unit names
UNIT_ABBR = {
    # Distance
    'meter': 'meter', 'meters': 'meter', 'm': 'meter',
    'kilometer': 'kilometer', 'kilometers': 'kilometer', 'km': 'kilometer',
    'centimeter': 'centimeter', 'centimeters': 'centimeter', 'cm': 'centimeter',
    'mile': 'mile', 'miles': 'mile', 'mi': 'mile',
    'yard': 'yard', 'yards': 'yard', 'yd': 'yard',
    'foot': 'foot', 'feet': 'foot', 'ft': 'foot',
    'inch': 'inch', 'inches': 'inch',

    # Weight
    'pound': 'pound', 'pounds': 'pound', 'lb': 'pound', 'lbs': 'pound',
    'kilogram': 'kilogram', 'kilograms': 'kilogram', 'kg': 'kilogram',
    'gram': 'gram', 'grams': 'gram', 'g': 'gram',
    'ounce': 'ounce', 'ounces': 'ounce', 'oz': 'ounce',

    # Volume
    'liter': 'liter', 'liters': 'liter', 'litre': 'liter', 'litres': 'liter', 'l': 'liter',
    'milliliter': 'milliliter', 'milliliters': 'milliliter', 'ml': 'milliliter',
    'gallon': 'gallon', 'gallons': 'gallon', 'gal': 'gallon',
    'quart': 'quart', 'quarts': 'quart', 'qt': 'quart',
    'cup': 'cup', 'cups': 'cup',

    # Temperature
    'celsius': 'degC', 'c': 'degC', '°c': 'degC',
    'fahrenheit': 'degF', 'f': 'degF', '°f': 'degF',
    'kelvin': 'kelvin', 'k': 'kelvin',

    # Data
    'byte': 'byte', 'bytes': 'byte',
    'kb': 'kilobyte', 'mb': 'megabyte', 'gb': 'gigabyte', 'tb': 'terabyte',
}

# pint unit name -> display label
UNIT_DISPLAY = {
    'meter': 'm', 'kilometer': 'km', 'centimeter': 'cm',
    'mile': 'mi', 'yard': 'yd', 'foot': 'ft', 'inch': 'in',
    'pound': 'lb', 'kilogram': 'kg', 'gram': 'g', 'ounce': 'oz',
    'liter': 'L', 'milliliter': 'mL', 'gallon': 'gal', 'quart': 'qt', 'cup': 'cups',
    'degC': '°C', 'degF': '°F', 'kelvin': 'K',
    'byte': 'B', 'kilobyte': 'KB', 'megabyte': 'MB', 'gigabyte': 'GB', 'terabyte': 'TB',
}


# =============================================================================
# DATE / TIME CONSTANTS
# =============================================================================

MONTH_NAMES = {
    'jan': 1, 'january': 1, 'feb': 2, 'february': 2, 'mar': 3, 'march': 3,
    'apr': 4, 'april': 4, 'may': 5, 'jun': 6, 'june': 6,
    'jul': 7, 'july': 7, 'aug': 8, 'august': 8, 'sep': 9, 'sept': 9, 'september': 9,
    'oct': 10, 'october': 10, 'nov': 11, 'november': 11, 'dec': 12, 'december': 12,
}

# City names -> IANA zone
CITY_TIMEZONES = {
    'seattle': 'America/Los_Angeles', 'los angeles': 'America/Los_Angeles',
    'la': 'America/Los_Angeles', 'san francisco': 'America/Los_Angeles',
    'sf': 'America/Los_Angeles', 'portland': 'America/Los_Angeles',
    'denver': 'America/Denver', 'phoenix': 'America/Phoenix',
    'chicago': 'America/Chicago', 'dallas': 'America/Chicago',
    'houston': 'America/Chicago', 'austin': 'America/Chicago',
    'new york': 'America/New_York', 'nyc': 'America/New_York',
    'boston': 'America/New_York', 'miami': 'America/New_York',
    'washington': 'America/New_York', 'atlanta': 'America/New_York',
    'honolulu': 'Pacific/Honolulu', 'anchorage': 'America/Anchorage',
    'toronto': 'America/Toronto', 'vancouver': 'America/Vancouver',
    'london': 'Europe/London', 'paris': 'Europe/Paris', 'berlin': 'Europe/Berlin',
    'amsterdam': 'Europe/Amsterdam', 'rome': 'Europe/Rome', 'madrid': 'Europe/Madrid',
    'vienna': 'Europe/Vienna', 'zurich': 'Europe/Zurich', 'stockholm': 'Europe/Stockholm',
    'warsaw': 'Europe/Warsaw', 'prague': 'Europe/Prague', 'athens': 'Europe/Athens',
    'istanbul': 'Europe/Istanbul', 'moscow': 'Europe/Moscow',
    'kiev': 'Europe/Kyiv', 'kyiv': 'Europe/Kyiv',
    'dubai': 'Asia/Dubai', 'mumbai': 'Asia/Kolkata', 'delhi': 'Asia/Kolkata',
    'tokyo': 'Asia/Tokyo', 'seoul': 'Asia/Seoul', 'beijing': 'Asia/Shanghai',
    'shanghai': 'Asia/Shanghai', 'hong kong': 'Asia/Hong_Kong',
    'singapore': 'Asia/Singapore', 'bangkok': 'Asia/Bangkok',
    'sydney': 'Australia/Sydney', 'melbourne': 'Australia/Melbourne',
    'auckland': 'Pacific/Auckland', 'sao paulo': 'America/Sao_Paulo',
    'mexico city': 'America/Mexico_City', 'cairo': 'Africa/Cairo',
    'johannesburg': 'Africa/Johannesburg',
}

# Timezone abbreviations -> IANA zone
TIMEZONE_ABBREVIATIONS = {
    'pst': 'America/Los_Angeles', 'pdt': 'America/Los_Angeles',
    'mst': 'America/Denver', 'mdt': 'America/Denver',
    'cst': 'America/Chicago', 'cdt': 'America/Chicago',
    'est': 'America/New_York', 'edt': 'America/New_York',
    'utc': 'UTC', 'gmt': 'UTC',
    'bst': 'Europe/London', 'cet': 'Europe/Paris', 'cest': 'Europe/Paris',
    'eet': 'Europe/Kyiv', 'eest': 'Europe/Kyiv', 'msk': 'Europe/Moscow',
    'ist': 'Asia/Kolkata', 'jst': 'Asia/Tokyo', 'kst': 'Asia/Seoul',
    'aest': 'Australia/Sydney', 'aedt': 'Australia/Sydney',
    'nzst': 'Pacific/Auckland', 'nzdt': 'Pacific/Auckland',
}

# Average lengths used for fractional month/year durations
DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25


# =============================================================================
# APPLICATION METADATA
# =============================================================================

APP_NAME = "SmartCalc"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Live line calculator with references, currency, dates and subnets"
