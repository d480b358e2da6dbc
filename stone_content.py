# ─────────────────────────────────────────────────────────────────────────────
#  Fixed content of the stone identifier
#
#  STONE_PROMPT     — text sent to the AI together with every uploaded photo
#  DEFAULT_IMAGE    — bundled photo shown on first visit
#  DEFAULT_ANALYSIS — analysis shown for DEFAULT_IMAGE (no AI call on first load)
#  ACCEPTED_TYPES   — value of the file input's accept attribute
# ─────────────────────────────────────────────────────────────────────────────
import os

_HERE = os.path.dirname(os.path.abspath(__file__))

DEFAULT_IMAGE = os.path.join(_HERE, "static", "default-stone.bmp")

ACCEPTED_TYPES = "image/jpeg,image/png,image/jpg"

STONE_PROMPT = (
    "Analyze this stone image for educational purposes and provide the following information:\n"
    "1. Stone identification (name, type, color, texture, composition)\n"
    "2. Physical properties (hardness, density, porosity, grain size, fracture)\n"
    "3. Geological significance (age, environment, distribution, associated rocks)\n"
    "4. Historical and practical uses (construction, historical significance, modern applications)\n"
    "5. Additional information (weathering, economic value, similar stones, interesting facts)\n"
    "\n"
    "IMPORTANT: This is for educational purposes only."
)

DEFAULT_ANALYSIS = """1. Stone Identification:
- Name: Granite
- Type: Igneous rock
- Color: Typically pink, white, gray, or black
- Texture: Phaneritic (coarse-grained)
- Composition: Quartz, feldspar, mica, and amphibole

2. Physical Properties:
- Hardness: 6-7 on Mohs scale
- Density: 2.65-2.75 g/cm³
- Porosity: Low (0.5-1.5%)
- Grain Size: Medium to coarse
- Fracture: Irregular/uneven
- Formation: Slow cooling of magma beneath Earth's surface

3. Geological Significance:
- Age: Varies widely, often hundreds of millions of years old
- Environment: Forms deep within the Earth's crust
- Distribution: Found on all continents
- Associated Rocks: Often found with diorite, gabbro, and rhyolite
- Geological Setting: Plutonic (intrusive igneous) environments

4. Historical & Practical Uses:
- Construction: Building material, countertops, floor tiles, monuments
- Historical Significance: Used in ancient Egyptian pyramids, Roman structures
- Modern Applications: Kitchen countertops, building facades, paving
- Cultural Importance: Symbol of strength and durability in many cultures
- Famous Examples: Mount Rushmore, many historical monuments

5. Additional Information:
- Weathering: Resistant to weathering but can break down to form sandy soil
- Economic Value: Widely quarried worldwide for construction
- Similar Stones: Diorite, gabbro, granodiorite
- Interesting Facts: One of the most abundant rocks in continental crust
- Care: Requires sealing for indoor use to prevent staining"""
