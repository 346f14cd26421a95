"""
Internationalization (i18n) module for the AntNS naming system.

Provides translations for all user-facing messages in English (en) and German (de).
"""


# Supported languages
SUPPORTED_LANGUAGES = frozenset({"en", "de"})
DEFAULT_LANGUAGE = "en"


# Translation dictionary with all messages
# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Domain registration
    "names.registering": {
        "en": "Registering domain: {domain}",
        "de": "Registriere Domain: {domain}",
    },
    "names.registered": {
        "en": "✓ Domain registered successfully!",
        "de": "✓ Domain erfolgreich registriert!",
    },
    "names.register_address": {
        "en": "Register address: {address}",
        "de": "Register-Adresse: {address}",
    },
    "names.key_saved": {
        "en": "Private key saved to {path}",
        "de": "Privater Schlüssel gespeichert unter {path}",
    },
    "names.already_registered": {
        "en": "✗ Domain {domain} is already registered",
        "de": "✗ Domain {domain} ist bereits registriert",
    },

    # Lookup and history
    "names.looking_up": {
        "en": "Looking up domain: {domain}",
        "de": "Suche Domain: {domain}",
    },
    "names.target": {
        "en": "Target: {target}",
        "de": "Ziel: {target}",
    },
    "names.owner": {
        "en": "Owner key: {public_key}",
        "de": "Eigentümer-Schlüssel: {public_key}",
    },
    "names.records_header": {
        "en": "Records for domain '{domain}':",
        "de": "Einträge der Domain '{domain}':",
    },
    "names.quick_warning": {
        "en": "⚠️  Quick lookup: result is UNVERIFIED (no signature check)",
        "de": "⚠️  Schnellsuche: Ergebnis ist NICHT VERIFIZIERT (keine Signaturprüfung)",
    },
    "names.history_header": {
        "en": "History of domain: {domain}",
        "de": "Verlauf der Domain: {domain}",
    },
    "names.history_owner": {
        "en": "Entry {number} (Owner):",
        "de": "Eintrag {number} (Eigentümer):",
    },
    "names.history_entry": {
        "en": "Entry {number} ({status}):",
        "de": "Eintrag {number} ({status}):",
    },
    "names.history_spam_reason": {
        "en": "  Reason: Invalid signature (spam)",
        "de": "  Grund: Ungültige Signatur (Spam)",
    },
    "names.history_corrupt_reason": {
        "en": "  Reason: Could not be downloaded or parsed",
        "de": "  Grund: Konnte nicht geladen oder gelesen werden",
    },
    "names.stats": {
        "en": "Statistics: {total} total, {valid} valid, {spam} spam, {corrupted} corrupted",
        "de": "Statistik: {total} gesamt, {valid} gültig, {spam} Spam, {corrupted} beschädigt",
    },
    "names.list_header": {
        "en": "Locally owned domains:",
        "de": "Lokal verwaltete Domains:",
    },
    "names.list_empty": {
        "en": "No domains found. Register one with: antns names register <domain>",
        "de": "Keine Domains gefunden. Registrieren mit: antns names register <domain>",
    },
    "names.export_warning": {
        "en": "⚠️  Anyone with this private key can update your domain. Keep it secret.",
        "de": "⚠️  Wer diesen Schlüssel besitzt, kann die Domain ändern. Geheim halten.",
    },
    "names.imported": {
        "en": "✓ Private key imported for {domain} (public key {public_key})",
        "de": "✓ Privater Schlüssel für {domain} importiert (öffentlicher Schlüssel {public_key})",
    },

    # Lookup outcomes
    "lookup.not_registered": {
        "en": "Domain {domain} is not registered.",
        "de": "Domain {domain} ist nicht registriert.",
    },
    "lookup.corrupt_registration": {
        "en": "Domain {domain} has a corrupt registration and cannot be resolved.",
        "de": "Domain {domain} hat eine beschädigte Registrierung und kann nicht aufgelöst werden.",
    },
    "lookup.no_records": {
        "en": "Domain {domain} is registered but has no valid records.",
        "de": "Domain {domain} ist registriert, hat aber keine gültigen Einträge.",
    },
    "lookup.no_target": {
        "en": "Domain {domain} has records but no root ANT record.",
        "de": "Domain {domain} hat Einträge, aber keinen ANT-Eintrag für die Wurzel.",
    },
    "lookup.network_error": {
        "en": "✗ Network error ({kind}): {message}",
        "de": "✗ Netzwerkfehler ({kind}): {message}",
    },

    # Record mutation
    "records.publishing": {
        "en": "Publishing new record set for {domain}...",
        "de": "Veröffentliche neue Einträge für {domain}...",
    },
    "records.published": {
        "en": "✓ Record set published (chunk {chunk})",
        "de": "✓ Einträge veröffentlicht (Chunk {chunk})",
    },
    "records.empty": {
        "en": "No records found for domain: {domain}",
        "de": "Keine Einträge für Domain gefunden: {domain}",
    },
    "records.index_out_of_range": {
        "en": "✗ {message}",
        "de": "✗ Index außerhalb des gültigen Bereichs: {message}",
    },
    "records.not_owner": {
        "en": "✗ Your local key does not own {domain}",
        "de": "✗ Ihr lokaler Schlüssel ist nicht Eigentümer von {domain}",
    },
    "records.no_key": {
        "en": "✗ No local key for {domain}. Import it with: antns names import",
        "de": "✗ Kein lokaler Schlüssel für {domain}. Importieren mit: antns names import",
    },

    # Validation
    "validation.invalid": {
        "en": "✗ Invalid input: {message}",
        "de": "✗ Ungültige Eingabe: {message}",
    },

    # Server
    "server.starting": {
        "en": "Starting AntNS servers...",
        "de": "Starte AntNS-Server...",
    },
    "server.dns_port": {
        "en": "DNS resolver: {host}:{port}",
        "de": "DNS-Resolver: {host}:{port}",
    },
    "server.proxy_port": {
        "en": "HTTP proxy: {host}:{port}",
        "de": "HTTP-Proxy: {host}:{port}",
    },
    "server.upstream": {
        "en": "Upstream: {upstream}",
        "de": "Upstream: {upstream}",
    },
    "server.cache_ttl": {
        "en": "Cache TTL: {minutes} minutes",
        "de": "Cache-TTL: {minutes} Minuten",
    },
    "server.cache_disabled": {
        "en": "Cache: disabled",
        "de": "Cache: deaktiviert",
    },
    "server.stopped": {
        "en": "Servers stopped.",
        "de": "Server gestoppt.",
    },
    "server.start_failed": {
        "en": "✗ Could not start servers: {error}",
        "de": "✗ Server konnten nicht gestartet werden: {error}",
    },
    "server.running": {
        "en": "  {name} ({host}:{port}): ✓ Running",
        "de": "  {name} ({host}:{port}): ✓ Läuft",
    },
    "server.not_running": {
        "en": "  {name} ({host}:{port}): ✗ Not running",
        "de": "  {name} ({host}:{port}): ✗ Läuft nicht",
    },

    # Keys / vault
    "keys.secret_missing": {
        "en": "✗ SECRET_KEY is not set; it is required for vault access",
        "de": "✗ SECRET_KEY ist nicht gesetzt; er wird für den Tresor benötigt",
    },
    "keys.backed_up": {
        "en": "✓ Backed up {count} key(s)",
        "de": "✓ {count} Schlüssel gesichert",
    },
    "keys.restored": {
        "en": "✓ Restored {count} key(s): {domains}",
        "de": "✓ {count} Schlüssel wiederhergestellt: {domains}",
    },
    "keys.status": {
        "en": "Backup from {created_at} (version {version}) holds {count} key(s)",
        "de": "Sicherung vom {created_at} (Version {version}) enthält {count} Schlüssel",
    },
    "keys.no_backup": {
        "en": "No key backup found in the vault.",
        "de": "Keine Schlüsselsicherung im Tresor gefunden.",
    },
    "keys.invalid_backup": {
        "en": "✗ Key backup is unusable: {message}",
        "de": "✗ Schlüsselsicherung ist unbrauchbar: {message}",
    },

    # Config
    "config.created": {
        "en": "Configuration created at: {path}",
        "de": "Konfiguration erstellt unter: {path}",
    },
    "config.exists": {
        "en": "Configuration already exists at {path} (use --force to overwrite)",
        "de": "Konfiguration existiert bereits unter {path} (--force zum Überschreiben)",
    },
    "config.valid": {
        "en": "Configuration at {path} is valid.",
        "de": "Konfiguration unter {path} ist gültig.",
    },
    "config.load_failed": {
        "en": "Error: Could not load config from {path}",
        "de": "Fehler: Konfiguration konnte nicht geladen werden: {path}",
    },

    # Simulation mode
    "simulation.enabled": {
        "en": "🔧 Simulation mode enabled - using a local in-memory network",
        "de": "🔧 Simulationsmodus aktiviert - lokales In-Memory-Netzwerk",
    },

    # Self-test messages
    "selftest.header": {
        "en": "AntNS self-test",
        "de": "AntNS Selbsttest",
    },
    "selftest.config_validation": {
        "en": "Configuration validation:",
        "de": "Konfigurationsprüfung:",
    },
    "selftest.config_valid": {
        "en": "Configuration is valid",
        "de": "Konfiguration ist gültig",
    },
    "selftest.config_invalid": {
        "en": "Configuration is invalid",
        "de": "Konfiguration ist ungültig",
    },
    "selftest.warnings": {
        "en": "Warnings:",
        "de": "Warnungen:",
    },
    "selftest.connectivity": {
        "en": "Gateway connectivity:",
        "de": "Gateway-Erreichbarkeit:",
    },
    "selftest.success": {
        "en": "Self-test passed",
        "de": "Selbsttest erfolgreich",
    },
    "selftest.failed": {
        "en": "Self-test failed",
        "de": "Selbsttest fehlgeschlagen",
    },
    "selftest.duration": {
        "en": "Duration",
        "de": "Dauer",
    },

    # Entry statuses
    "status.valid": {
        "en": "Valid",
        "de": "Gültig",
    },
    "status.spam": {
        "en": "Spam",
        "de": "Spam",
    },
    "status.corrupted": {
        "en": "Corrupted",
        "de": "Beschädigt",
    },
}


def get_message(key: str, language: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'names.registered')
        language: The language code ('en' or 'de')
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message, or the key if not found.
    """
    if language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Missing arguments leave the template unformatted
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    """Check if a translation exists for a key and language."""
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    return {key for key, translations in TRANSLATIONS.items() if language not in translations}


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
    """
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
