from pydantic import BaseModel, ConfigDict


class Domain(BaseModel):
    """
    Пользовательский домен приложения.

    Поля:
        name: имя домена (``www.example.com``);
        ssl: подключён ли TLS‑сертификат;
        canonical: является ли домен каноническим для приложения;
        letsencrypt_enabled / letsencrypt / letsencrypt_status: состояние
            автоматического сертификата Let's Encrypt;
        tlscert, tlskey, validity: данные собственного сертификата, если есть.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    ssl: bool = False
    canonical: bool = False
    letsencrypt_enabled: bool = False
    letsencrypt: bool = False
    letsencrypt_status: str = ""
    tlscert: str | None = None
    tlskey: str | None = None
    validity: str | None = None
