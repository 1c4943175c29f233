from selenium import webdriver
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager
from selenium.webdriver.chrome.options import Options
from .. import config

def create_driver(*, headless: bool | None = None):
    options = Options()
    if config.HEADLESS if headless is None else headless:
        options.add_argument("--headless=new")
    options.add_argument("--window-size=1280,900")
    # file:// pages only; keep the session quiet
    options.add_argument("--disable-extensions")
    driver = webdriver.Chrome(service=Service(ChromeDriverManager().install()),
                              options=options)
    driver.implicitly_wait(config.IMPLICIT_WAIT)
    return driver
