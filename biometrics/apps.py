from django.apps import AppConfig


class BiometricsConfig(AppConfig):
    name = "biometrics"
    verbose_name = "Biometric matching"

    def ready(self):
        # Échoue au démarrage si le profil BIOMETRICS est invalide
        from .services.config import get_config
        get_config()
