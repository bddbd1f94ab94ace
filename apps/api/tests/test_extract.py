from conftest import PAGE_URL, parse_html

from data_pipeline.extract import ListingExtractor
from data_pipeline.models import PRICE_NOT_INFORMED, LOCATION_NOT_INFORMED
from data_pipeline.selectors import ExtractionConfig


class TestPrimaryStrategy:
    def test_cards_are_extracted_in_document_order(self, cards_html):
        listings = ListingExtractor().extract(parse_html(cards_html), PAGE_URL)

        assert [l.title for l in listings] == ["iPhone 13 128GB azul", "Samsung Galaxy S22"]

        iphone, galaxy = listings
        assert iphone.link == "https://mg.olx.com.br/belo-horizonte-e-regiao/celulares/iphone-13-128gb-1234567890"
        assert iphone.price_text == "R$ 3.500"
        assert iphone.location == "Belo Horizonte - MG"
        assert iphone.date_text == "Hoje, 14:30"
        assert iphone.image == "https://img.olx.com.br/images/12/1234567890.jpg"

        assert galaxy.link == "https://www.olx.com.br/contagem/celulares/samsung-galaxy-s22-2233445566"
        assert galaxy.price_text == "R$ 1.234,56"

    def test_duplicate_link_is_emitted_once(self, cards_html):
        listings = ListingExtractor().extract(parse_html(cards_html), PAGE_URL)
        links = [l.link for l in listings]
        assert len(links) == len(set(links))

    def test_datetime_attribute_wins_over_text(self, cards_html):
        _, galaxy = ListingExtractor().extract(parse_html(cards_html), PAGE_URL)
        assert galaxy.date_text == "2024-11-15T10:00:00"

    def test_data_uri_image_falls_through_to_lazy_source(self, cards_html):
        _, galaxy = ListingExtractor().extract(parse_html(cards_html), PAGE_URL)
        assert galaxy.image == "https://img.olx.com.br/images/22/2233445566.jpg"

    def test_data_uri_only_image_is_absent(self):
        html = """
        <div class="olx-adcard">
          <a href="https://sp.olx.com.br/x/moto-g-1112223334"><h2>Moto G 5G</h2></a>
          <img src="data:image/png;base64,AAAA">
        </div>
        """
        [listing] = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert listing.image is None

    def test_missing_fields_get_sentinels(self):
        html = """
        <div data-lurker_list_id="1">
          <h2>Galaxy A54 na caixa</h2>
          <a href="https://sp.olx.com.br/x/galaxy-a54-1112223335">ver anúncio</a>
        </div>
        """
        [listing] = ListingExtractor().extract(parse_html(html), PAGE_URL)

        assert listing.title == "Galaxy A54 na caixa"
        assert listing.link == "https://sp.olx.com.br/x/galaxy-a54-1112223335"
        assert listing.price_text == PRICE_NOT_INFORMED
        assert listing.location == LOCATION_NOT_INFORMED
        assert listing.date_text is None
        assert listing.image is None

    def test_price_not_looking_like_currency_falls_through(self):
        html = """
        <div class="olx-adcard">
          <a href="https://sp.olx.com.br/x/ps5-1112223336"><h2>PlayStation 5</h2></a>
          <h3>Entrega rápida</h3>
          <span class="card-price">R$ 2.999</span>
        </div>
        """
        [listing] = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert listing.price_text == "R$ 2.999"

    def test_anchor_attempt_when_no_heading(self):
        html = """
        <div class="olx-adcard">
          <a href="https://sp.olx.com.br/x/foto">Foto</a>
          <a href="https://sp.olx.com.br/x/ipad-air-1112223337">iPad Air 5ª geração</a>
        </div>
        """
        [listing] = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert listing.title == "iPad Air 5ª geração"
        assert listing.link == "https://sp.olx.com.br/x/ipad-air-1112223337"

    def test_card_without_link_is_skipped(self):
        html = """
        <div class="olx-adcard"><h2>Sem link</h2></div>
        <div class="olx-adcard">
          <a href="https://sp.olx.com.br/x/kindle-1112223338"><h2>Kindle Paperwhite</h2></a>
        </div>
        """
        listings = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert [l.title for l in listings] == ["Kindle Paperwhite"]


class TestFallbackStrategy:
    def test_fallback_when_no_cards(self, fallback_html):
        listings = ListingExtractor().extract(parse_html(fallback_html), PAGE_URL)

        assert [l.title for l in listings] == ["iPhone 12 64GB seminovo", "Xiaomi Redmi Note 12"]

        iphone, xiaomi = listings
        assert iphone.price_text == "R$ 2.100"
        assert iphone.location == "Betim - MG"
        assert iphone.date_text is None

        # no card-like ancestor: sentinels only
        assert xiaomi.price_text == PRICE_NOT_INFORMED
        assert xiaomi.location == LOCATION_NOT_INFORMED

    def test_fallback_skipped_when_primary_found_something(self, fallback_html):
        html = fallback_html.replace(
            '<ul class="results">',
            '<div class="olx-adcard"><a href="https://mg.olx.com.br/x/tv-55-1231231231">'
            "<h2>TV 55 polegadas</h2></a></div>"
            '<ul class="results">',
        )
        listings = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert [l.title for l in listings] == ["TV 55 polegadas"]

    def test_fallback_when_cards_yield_nothing(self, fallback_html):
        html = fallback_html.replace(
            '<ul class="results">',
            '<div class="olx-adcard"><span>card vazio</span></div><ul class="results">',
        )
        listings = ListingExtractor().extract(parse_html(html), PAGE_URL)
        assert len(listings) == 2

    def test_empty_page(self):
        assert ListingExtractor().extract(parse_html("<html><body></body></html>"), PAGE_URL) == []


def test_custom_card_selectors():
    config = ExtractionConfig(card_selectors=["article.ad"])
    html = """
    <article class="ad">
      <a href="https://rj.olx.com.br/x/bike-aro-29-7778889990"><h2>Bike aro 29</h2></a>
      <span class="price">R$ 900</span>
    </article>
    <div class="olx-adcard">
      <a href="https://rj.olx.com.br/x/ignored-7778889991"><h2>Ignorado</h2></a>
    </div>
    """
    listings = ListingExtractor(config).extract(parse_html(html), PAGE_URL)
    assert [l.title for l in listings] == ["Bike aro 29"]
    assert listings[0].price_text == "R$ 900"
